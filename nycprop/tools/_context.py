"""Per-request logging context shared by the tool entry points."""

import logging


class ToolLogger(logging.LoggerAdapter):
    """Prefix every record with the tool name and its key inputs."""

    def process(self, msg, kwargs):
        context = " ".join(
            f"{k}={v}" for k, v in self.extra.items() if v not in (None, "")
        )
        return f"[{context}] {msg}", kwargs


def tool_logger(name: str, tool: str, **context) -> ToolLogger:
    return ToolLogger(logging.getLogger(name), {"tool": tool, **context})
