"""Generation-backed agents: evaluation, sequencing and reporting."""
