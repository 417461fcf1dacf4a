"""Core data vocabulary of a node graph: ports, data types, data and models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class PortType(Enum):
    """Side of a node a port lives on."""

    NONE = "none"
    IN = "in"
    OUT = "out"


def opposite_port(port_type: PortType) -> PortType:
    """Return the port side facing ``port_type``; NONE stays NONE."""
    if port_type is PortType.IN:
        return PortType.OUT
    if port_type is PortType.OUT:
        return PortType.IN
    return PortType.NONE


class Signal:
    """A minimal observer list: connected slots are called on emit, in order."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)


@dataclass(frozen=True)
class NodeDataType:
    """Identifier and display name of the data carried by a port."""

    id: str = ""
    name: str = ""


class NodeData(ABC):
    """A value travelling along connections between nodes."""

    @abstractmethod
    def type(self) -> NodeDataType:
        """The type descriptor of this data."""


class NodeValidationState(Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class DataModel(ABC):
    """Behaviour of a node: its ports, their types and how data flows through."""

    def __init__(self) -> None:
        self.data_updated = Signal()
        self.data_invalidated = Signal()

    @abstractmethod
    def caption(self) -> str:
        """Text shown in the node's title."""

    def caption_visible(self) -> bool:
        return True

    @abstractmethod
    def name(self) -> str:
        """Unique name under which the model is registered."""

    def port_caption(self, port_type: PortType, port_index: int) -> str:
        return ""

    def port_caption_visible(self, port_type: PortType, port_index: int) -> bool:
        return False

    @abstractmethod
    def n_ports(self, port_type: PortType) -> int:
        """Number of ports on the given side."""

    @abstractmethod
    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        """Type of data a port accepts or produces."""

    @abstractmethod
    def out_data(self, port_index: int) -> NodeData | None:
        """Data currently available at an output port."""

    @abstractmethod
    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """Receive data (or None when it goes away) on an input port."""

    def validation_state(self) -> NodeValidationState:
        return NodeValidationState.VALID

    def validation_message(self) -> str:
        return ""

    def resizable(self) -> bool:
        return False

    def save(self) -> dict[str, Any]:
        return {"name": self.name()}

    def restore(self, data: dict[str, Any]) -> None:
        """Restore model state from ``save`` output; the base model keeps none."""


@dataclass(frozen=True)
class TextData(NodeData):
    text: str = ""

    def type(self) -> NodeDataType:
        return NodeDataType("text", "Text")


@dataclass(frozen=True)
class PixmapData(NodeData):
    pixmap: Any = field(default=None)

    def type(self) -> NodeDataType:
        return NodeDataType("pixmap", "P")


class MyNodeData(NodeData):
    def type(self) -> NodeDataType:
        return NodeDataType("MyNodeData", "My Node Data")


class SimpleNodeData(NodeData):
    def type(self) -> NodeDataType:
        return NodeDataType("SimpleData", "Simple Data")


class NaiveDataModel(DataModel):
    """Two typed ports on each side and no logic."""

    def caption(self) -> str:
        return "Naive Data Model"

    def name(self) -> str:
        return "NaiveDataModel"

    def n_ports(self, port_type: PortType) -> int:
        if port_type in (PortType.IN, PortType.OUT):
            return 2
        return 1

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        if port_type in (PortType.IN, PortType.OUT):
            if port_index == 0:
                return MyNodeData().type()
            if port_index == 1:
                return SimpleNodeData().type()
        return NodeDataType()

    def out_data(self, port_index: int) -> NodeData:
        if port_index < 1:
            return MyNodeData()
        return SimpleNodeData()

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """Input is ignored."""


class MyDataModel(DataModel):
    """Three ports on each side, all carrying ``MyNodeData``."""

    def caption(self) -> str:
        return "My Data Model"

    def name(self) -> str:
        return "MyDataModel"

    def save(self) -> dict[str, Any]:
        return {"name": self.name()}

    def n_ports(self, port_type: PortType) -> int:
        return 3

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return MyNodeData().type()

    def out_data(self, port_index: int) -> NodeData:
        return MyNodeData()

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """Input is ignored."""