"""Route prompts to terminal rooms via an agent orchestrator or direct workers."""

__version__ = "0.1.0"
