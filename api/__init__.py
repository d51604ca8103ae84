"""HTTP surface for the interview orchestrator."""
