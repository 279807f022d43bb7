"""External agent orchestrator: CLI client and completion polling."""

from roomdispatch.orchestrator.client import (
    ClaudeFlowClient,
    OrchestratorClient,
    parse_agent_id,
    parse_task_id,
)
from roomdispatch.orchestrator.poller import CompletionPoller, OrchestrationTask, TaskState

__all__ = [
    "ClaudeFlowClient",
    "CompletionPoller",
    "OrchestrationTask",
    "OrchestratorClient",
    "TaskState",
    "parse_agent_id",
    "parse_task_id",
]
