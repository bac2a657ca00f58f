"""
Conversion between the daemon's dataclasses and their JSON wire form.

Wire names are camelCase (serverUrl, toolName, daemonArgs, ...), attribute
names are snake_case. A tool's role travels under the key "type".
"""

import dataclasses
import json
from typing import List

import cattr
from cattrs.gen import make_dict_structure_fn, make_dict_unstructure_fn, override
from pydantic import BaseModel

from .hooks.hook import Hook, HookTool
from .lifecycle.lifecycle import MessageLifecycle
from .models.provider import ModelProvider
from .tools.protocol import ToolParameter, ToolProvider


def camel_case(name: str) -> str:
  first, *rest = name.split("_")
  return first + "".join(part.title() for part in rest)


def _renames(cls, **explicit) -> dict:
  renames = {}
  for f in dataclasses.fields(cls):
    wire_name = explicit.get(f.name, camel_case(f.name))
    if wire_name != f.name:
      renames[f.name] = override(rename=wire_name)
  return renames


class DaemonConverter:
  def __init__(self):
    self.converter = cattr.Converter()
    self._register_hooks()

  def _register_hooks(self):
    wire_classes = {
      ToolParameter: {},
      ToolProvider: {"role": "type"},
      HookTool: {},
      Hook: {},
      ModelProvider: {},
    }
    for cls, explicit in wire_classes.items():
      renames = _renames(cls, **explicit)
      self.converter.register_structure_hook(cls, make_dict_structure_fn(cls, self.converter, **renames))
      self.converter.register_unstructure_hook(cls, make_dict_unstructure_fn(cls, self.converter, **renames))

    # MCP results are pydantic models
    self.converter.register_unstructure_hook(BaseModel, self._unstructure_model)
    self.converter.register_unstructure_hook(MessageLifecycle, self._unstructure_lifecycle)

  @staticmethod
  def _unstructure_model(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)

  def _unstructure_lifecycle(self, lifecycle: MessageLifecycle) -> dict:
    # A lifecycle is partial: fields that were never set are left out.
    unstructured = {}
    for f in dataclasses.fields(lifecycle):
      value = getattr(lifecycle, f.name)
      if value is None:
        continue
      unstructured[camel_case(f.name)] = self.converter.unstructure(value)
    return unstructured

  def tool_providers_from_json(self, data: str) -> List[ToolProvider]:
    return self.converter.structure(json.loads(data), List[ToolProvider])

  def hook_from_dict(self, data: dict) -> Hook:
    return self.converter.structure(data, Hook)

  def hook_to_dict(self, hook: Hook) -> dict:
    return self.converter.unstructure(hook)

  def model_provider_from_dict(self, data: dict) -> ModelProvider:
    return self.converter.structure(data, ModelProvider)

  def lifecycle_to_dict(self, lifecycle: MessageLifecycle) -> dict:
    return self.converter.unstructure(lifecycle)


CONVERTER = DaemonConverter()
