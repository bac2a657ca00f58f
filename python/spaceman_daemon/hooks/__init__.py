from .hook import Hook, HookTool, hooks_from_result
from .capabilities import DaemonCapabilities

__all__ = ["Hook", "HookTool", "hooks_from_result", "DaemonCapabilities"]
