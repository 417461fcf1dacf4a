"""Connections between node ports and the nodes they join."""

from __future__ import annotations

import uuid
from typing import Any, Callable

from nodeflow.data import (
    DataModel,
    NodeData,
    NodeDataType,
    PortType,
    Signal,
    opposite_port,
)
from nodeflow.geometry import ConnectionGeometry

INVALID = -1

TypeConverter = Callable[[NodeData | None], NodeData | None]


class Node:
    """A node in the graph: a data model plus the connections on its ports."""

    def __init__(self, model: DataModel, node_id: uuid.UUID | None = None) -> None:
        self.model = model
        self.id = node_id if node_id is not None else uuid.uuid4()
        self.connections: dict[tuple[PortType, int], dict[uuid.UUID, Connection]] = {}
        self.reacting_port_type = PortType.NONE
        self.reacting_data_type: NodeDataType | None = None
        model.data_updated.connect(self._on_data_updated)

    def _on_data_updated(self, port_index: int) -> None:
        data = self.model.out_data(port_index)
        for connection in list(self.connections.get((PortType.OUT, port_index), {}).values()):
            connection.propagate_data(data)

    def propagate_data(self, data: NodeData | None, port_index: int) -> None:
        """Hand data arriving on an input port to the model."""
        self.model.set_in_data(data, port_index)

    def erase_connection(
        self, port_type: PortType, port_index: int, connection_id: uuid.UUID
    ) -> None:
        port = self.connections.get((port_type, port_index))
        if port is not None:
            port.pop(connection_id, None)

    def react_to_possible_connection(
        self, port_type: PortType, data_type: NodeDataType
    ) -> None:
        """Remember that a dragged connection of ``data_type`` hovers this node."""
        self.reacting_port_type = port_type
        self.reacting_data_type = data_type

    def reset_reaction_to_connection(self) -> None:
        self.reacting_port_type = PortType.NONE
        self.reacting_data_type = None


class ConnectionState:
    """Which end of a connection still needs a port, and the node under it."""

    def __init__(self) -> None:
        self.required_port = PortType.NONE
        self.last_hovered_node: Node | None = None

    def set_required_port(self, port_type: PortType) -> None:
        self.required_port = port_type

    def set_no_required_port(self) -> None:
        self.required_port = PortType.NONE

    def requires_port(self) -> bool:
        return self.required_port is not PortType.NONE

    def interact_with_node(self, node: Node | None) -> None:
        if node is not None:
            self.last_hovered_node = node
        else:
            self.reset_last_hovered_node()

    def set_last_hovered_node(self, node: Node | None) -> None:
        self.last_hovered_node = node

    def reset_last_hovered_node(self) -> None:
        if self.last_hovered_node is not None:
            self.last_hovered_node.reset_reaction_to_connection()
        self.last_hovered_node = None


class Connection:
    """A link from an output port of one node to an input port of another."""

    def __init__(
        self,
        node_in: Node,
        port_index_in: int,
        node_out: Node,
        port_index_out: int,
        converter: TypeConverter | None = None,
    ) -> None:
        self._init_fields(converter)
        self.set_node_to_port(node_in, PortType.IN, port_index_in)
        self.set_node_to_port(node_out, PortType.OUT, port_index_out)

    def _init_fields(self, converter: TypeConverter | None) -> None:
        self.id = uuid.uuid4()
        self._in_node: Node | None = None
        self._out_node: Node | None = None
        self._in_port_index = INVALID
        self._out_port_index = INVALID
        self.state = ConnectionState()
        self.geometry = ConnectionGeometry()
        self.converter = converter
        self.updated = Signal()
        self.connection_completed = Signal()
        self.connection_made_incomplete = Signal()

    @classmethod
    def dragging(cls, port_type: PortType, node: Node, port_index: int) -> Connection:
        """A half-made connection attached to one port, the other end loose."""
        connection = cls.__new__(cls)
        connection._init_fields(None)
        connection.set_node_to_port(node, port_type, port_index)
        connection.set_required_port(opposite_port(port_type))
        return connection

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def complete(self) -> bool:
        return self._in_node is not None and self._out_node is not None

    @property
    def required_port(self) -> PortType:
        return self.state.required_port

    def save(self) -> dict[str, Any]:
        """JSON-ready description; empty while the connection is incomplete."""
        if self._in_node is None or self._out_node is None:
            return {}
        result: dict[str, Any] = {
            "in_id": str(self._in_node.id),
            "in_index": self._in_port_index,
            "out_id": str(self._out_node.id),
            "out_index": self._out_port_index,
        }
        if self.converter is not None:
            def type_json(port_type: PortType) -> dict[str, str]:
                data_type = self.data_type(port_type)
                return {"id": data_type.id, "name": data_type.name}

            result["converter"] = {
                "in": type_json(PortType.IN),
                "out": type_json(PortType.OUT),
            }
        return result

    def set_required_port(self, port_type: PortType) -> None:
        """Detach the given end so that it has to be connected again."""
        self.state.set_required_port(port_type)
        if port_type is PortType.OUT:
            self._out_node = None
            self._out_port_index = INVALID
        elif port_type is PortType.IN:
            self._in_node = None
            self._in_port_index = INVALID

    def port_index(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return self._in_port_index
        if port_type is PortType.OUT:
            return self._out_port_index
        return INVALID

    def node(self, port_type: PortType) -> Node | None:
        if port_type is PortType.IN:
            return self._in_node
        if port_type is PortType.OUT:
            return self._out_node
        return None

    def set_node_to_port(self, node: Node, port_type: PortType, port_index: int) -> None:
        """Attach one end to a node's port, announcing completion if it happens."""
        if port_type is PortType.NONE:
            raise ValueError("cannot attach a connection to PortType.NONE")
        was_incomplete = not self.complete
        if port_type is PortType.OUT:
            self._out_node = node
            self._out_port_index = port_index
        else:
            self._in_node = node
            self._in_port_index = port_index
        self.state.set_no_required_port()
        self.updated.emit(self)
        if self.complete and was_incomplete:
            self.connection_completed.emit(self)

    def remove_from_nodes(self) -> None:
        if self._in_node is not None:
            self._in_node.erase_connection(PortType.IN, self._in_port_index, self.id)
        if self._out_node is not None:
            self._out_node.erase_connection(PortType.OUT, self._out_port_index, self.id)

    def clear_node(self, port_type: PortType) -> None:
        if port_type is PortType.NONE:
            raise ValueError("cannot detach PortType.NONE")
        if self.complete:
            self.connection_made_incomplete.emit(self)
        if port_type is PortType.IN:
            self._in_node = None
            self._in_port_index = INVALID
        else:
            self._out_node = None
            self._out_port_index = INVALID

    def data_type(self, port_type: PortType) -> NodeDataType:
        """Data type at the given end, or at the attached end if only one is set."""
        if self._in_node is not None and self._out_node is not None:
            if port_type is PortType.IN:
                return self._in_node.model.data_type(port_type, self._in_port_index)
            return self._out_node.model.data_type(port_type, self._out_port_index)
        if self._in_node is not None:
            return self._in_node.model.data_type(PortType.IN, self._in_port_index)
        if self._out_node is not None:
            return self._out_node.model.data_type(PortType.OUT, self._out_port_index)
        raise ValueError("connection is attached to no node")

    def propagate_data(self, data: NodeData | None) -> None:
        """Send data to the input end, through the converter if there is one."""
        if self._in_node is None:
            return
        if self.converter is not None:
            data = self.converter(data)
        self._in_node.propagate_data(data, self._in_port_index)

    def propagate_empty_data(self) -> None:
        self.propagate_data(None)

    def close(self) -> None:
        """Tear the connection down, telling the input end its data is gone."""
        if self.complete:
            self.connection_made_incomplete.emit(self)
        self.propagate_empty_data()
        self.state.reset_last_hovered_node()