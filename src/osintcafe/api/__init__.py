"""HTTP surface over the analysis orchestrator."""
