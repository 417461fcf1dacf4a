import pytest

from nodeflow.connection import INVALID, Connection, ConnectionState, Node
from nodeflow.data import (
    DataModel,
    MyNodeData,
    NaiveDataModel,
    NodeDataType,
    PortType,
    SimpleNodeData,
)


class RecordingModel(DataModel):
    def __init__(self):
        super().__init__()
        self.received = []
        self.output = None

    def caption(self):
        return "Recorder"

    def name(self):
        return "Recorder"

    def n_ports(self, port_type):
        return 1

    def data_type(self, port_type, port_index):
        return NodeDataType(f"{port_type.value}-{port_index}", "Recorded")

    def out_data(self, port_index):
        return self.output

    def set_in_data(self, data, port_index):
        self.received.append((data, port_index))


@pytest.fixture
def nodes():
    return Node(RecordingModel()), Node(RecordingModel())


def test_complete_connection(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 1)
    assert connection.complete
    assert connection.node(PortType.IN) is node_in
    assert connection.node(PortType.OUT) is node_out
    assert connection.port_index(PortType.IN) == 0
    assert connection.port_index(PortType.OUT) == 1
    assert connection.port_index(PortType.NONE) == INVALID
    assert not connection.state.requires_port()


def test_dragging_connection_requires_opposite_port(nodes):
    node_in, _ = nodes
    connection = Connection.dragging(PortType.IN, node_in, 0)
    assert not connection.complete
    assert connection.required_port is PortType.OUT
    assert connection.state.requires_port()
    assert connection.node(PortType.OUT) is None
    assert connection.port_index(PortType.OUT) == INVALID


def test_set_node_to_port_completes_once(nodes):
    node_in, node_out = nodes
    connection = Connection.dragging(PortType.OUT, node_out, 0)
    completed = []
    connection.connection_completed.connect(completed.append)
    connection.set_node_to_port(node_in, PortType.IN, 0)
    connection.set_node_to_port(node_in, PortType.IN, 0)
    assert completed == [connection]
    assert connection.required_port is PortType.NONE


def test_set_node_to_none_port_raises(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 0)
    with pytest.raises(ValueError):
        connection.set_node_to_port(node_in, PortType.NONE, 0)


def test_save_complete(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 1)
    assert connection.save() == {
        "in_id": str(node_in.id),
        "in_index": 0,
        "out_id": str(node_out.id),
        "out_index": 1,
    }


def test_save_with_converter_includes_types():
    node_in, node_out = Node(NaiveDataModel()), Node(NaiveDataModel())
    connection = Connection(node_in, 1, node_out, 0, converter=lambda data: data)
    saved = connection.save()
    assert saved["converter"] == {
        "in": {"id": SimpleNodeData().type().id, "name": SimpleNodeData().type().name},
        "out": {"id": MyNodeData().type().id, "name": MyNodeData().type().name},
    }


def test_save_incomplete_is_empty(nodes):
    node_in, _ = nodes
    assert Connection.dragging(PortType.IN, node_in, 0).save() == {}


def test_data_type_uses_attached_end(nodes):
    node_in, node_out = nodes
    connection = Connection.dragging(PortType.OUT, node_out, 0)
    assert connection.data_type(PortType.IN) == node_out.model.data_type(PortType.OUT, 0)


def test_data_type_without_nodes_raises(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 0)
    connection.clear_node(PortType.IN)
    connection.clear_node(PortType.OUT)
    with pytest.raises(ValueError):
        connection.data_type(PortType.IN)


def test_clear_node_emits_made_incomplete(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 0)
    events = []
    connection.connection_made_incomplete.connect(events.append)
    connection.clear_node(PortType.OUT)
    assert events == [connection]
    assert connection.port_index(PortType.OUT) == INVALID
    assert not connection.complete


def test_propagate_data_through_converter(nodes):
    node_in, node_out = nodes
    data = MyNodeData()
    replacement = SimpleNodeData()
    connection = Connection(node_in, 0, node_out, 0, converter=lambda value: replacement)
    connection.propagate_data(data)
    assert node_in.model.received == [(replacement, 0)]


def test_close_sends_empty_data(nodes):
    node_in, node_out = nodes
    events = []
    with Connection(node_in, 0, node_out, 0) as connection:
        connection.connection_made_incomplete.connect(events.append)
    assert node_in.model.received == [(None, 0)]
    assert events == [connection]


def test_remove_from_nodes_erases_entries(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 0)
    node_in.connections[(PortType.IN, 0)] = {connection.id: connection}
    node_out.connections[(PortType.OUT, 0)] = {connection.id: connection}
    connection.remove_from_nodes()
    assert node_in.connections[(PortType.IN, 0)] == {}
    assert node_out.connections[(PortType.OUT, 0)] == {}


def test_node_forwards_updated_output(nodes):
    node_in, node_out = nodes
    connection = Connection(node_in, 0, node_out, 0)
    node_out.connections[(PortType.OUT, 0)] = {connection.id: connection}
    payload = MyNodeData()
    node_out.model.output = payload
    node_out.model.data_updated.emit(0)
    assert node_in.model.received == [(payload, 0)]


def test_state_interaction_resets_reaction(nodes):
    node_in, _ = nodes
    state = ConnectionState()
    data_type = NodeDataType("x", "X")
    node_in.react_to_possible_connection(PortType.IN, data_type)
    state.interact_with_node(node_in)
    assert state.last_hovered_node is node_in
    assert node_in.reacting_data_type == data_type
    state.interact_with_node(None)
    assert state.last_hovered_node is None
    assert node_in.reacting_port_type is PortType.NONE
    assert node_in.reacting_data_type is None


def test_state_required_port_round_trip():
    state = ConnectionState()
    state.set_required_port(PortType.IN)
    assert state.requires_port()
    state.set_no_required_port()
    assert not state.requires_port()