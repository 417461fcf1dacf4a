"""Flow scenes of data-described models, stored as XML flow documents."""

from __future__ import annotations

import argparse
import uuid
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable

from nodeflow.calculator import DataSource, DecimalData
from nodeflow.connection import Connection, Node, TypeConverter
from nodeflow.data import DataModel, PortType, Signal
from nodeflow.geometry import Point
from nodeflow.registry import DataModelRegistry
from nodeflow.style import ConnectionStyle, set_connection_style

FLOW_VERSION = "2"
FLOW_SUFFIX = ".flow"
_INDENT = "    "

_CALCULATOR_STYLE = """
{
  "ConnectionStyle": {
    "ConstructionColor": "gray",
    "NormalColor": "black",
    "SelectedColor": "gray",
    "SelectedHaloColor": "deepskyblue",
    "HoveredColor": "deepskyblue",

    "LineWidth": 3.0,
    "ConstructionLineWidth": 2.0,
    "PointDiameter": 10.0,

    "UseDataDefinedColors": true
  }
}
"""


def _parse(xml_text: str | bytes) -> ET.Element:
    try:
        return ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ValueError(f"malformed XML: {exc}") from exc


def _data_source_factory(
    name: str,
    members: list[tuple[str, str, str]],
    signals_in: list[str],
    signals_out: list[str],
) -> Callable[[], DataModel]:
    def create() -> DataSource:
        return DataSource(
            name,
            ports=[port for port, _, _ in members],
            types=[kind for _, kind, _ in members],
            defaults=[default for _, _, default in members],
            data=[DecimalData() for _ in members],
            ports_in=list(signals_in),
            types_in=["Signal"] * len(signals_in),
            defaults_in=[""] * len(signals_in),
            data_in=[DecimalData() for _ in signals_in],
            ports_out=list(signals_out),
            types_out=["Signal"] * len(signals_out),
            defaults_out=[""] * len(signals_out),
            data_out=[DecimalData() for _ in signals_out],
        )

    return create


def load_model_definitions(xml_text: str | bytes) -> DataModelRegistry:
    """A registry with one data-source model per ``Node`` element of the document.

    Each ``Member`` child becomes a port on both sides; each ``Signal`` child
    of type ``In`` or ``Out`` becomes an extra port on that side.
    """
    root = _parse(xml_text)
    registry = DataModelRegistry()
    for element in root.findall("Node"):
        members = [
            (
                member.get("Name", ""),
                member.get("Type", ""),
                member.get("Default", ""),
            )
            for member in element.findall("Member")
        ]
        signals = element.findall("Signal")
        signals_in = [s.get("Name", "") for s in signals if s.get("Type") == "In"]
        signals_out = [s.get("Name", "") for s in signals if s.get("Type") == "Out"]
        registry.register_model(
            _data_source_factory(element.get("Name", ""), members, signals_in, signals_out),
            element.get("Category", ""),
        )
    return registry


def _format_id(node_id: uuid.UUID) -> str:
    return "{" + str(node_id) + "}"


def _parse_id(text: str | None) -> uuid.UUID:
    """The id written in ``text``; a missing, invalid or null id gets a fresh one."""
    try:
        parsed = uuid.UUID(text or "")
    except ValueError:
        return uuid.uuid4()
    return uuid.uuid4() if parsed.int == 0 else parsed


def _parse_float(text: str | None) -> float:
    try:
        return float(text) if text is not None else 0.0
    except ValueError:
        return 0.0


def _encode(text: str) -> str:
    replacements = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}
    return "".join(
        replacements.get(ch, f"&#x{ord(ch):02X};" if ord(ch) < 32 else ch) for ch in text
    )


def _attribute(name: str, value: str) -> str:
    quote = "'" if '"' in value else '"'
    return f" {name}={quote}{_encode(value)}{quote}"


def _print_element(element: ET.Element, depth: int, lines: list[str]) -> None:
    indent = _INDENT * depth
    attrs = "".join(_attribute(k, v) for k, v in element.attrib.items())
    children = list(element)
    if not children:
        lines.append(f"{indent}<{element.tag}{attrs} />")
        return
    lines.append(f"{indent}<{element.tag}{attrs}>")
    for child in children:
        _print_element(child, depth + 1, lines)
    lines.append(f"{indent}</{element.tag}>")


def _port_name(model: DataModel, port_type: PortType, port_index: int) -> str:
    if not isinstance(model, DataSource):
        raise ValueError(f"model {model.name()!r} has no named ports")
    shared = model.internal_ports
    if 0 <= port_index < len(shared):
        return shared[port_index]
    extra = model.internal_ports_in if port_type is PortType.IN else model.internal_ports_out
    index = port_index - len(shared)
    if 0 <= index < len(extra):
        return extra[index]
    raise ValueError(f"model {model.name()!r} has no port {port_index}")


def _find_port(model: DataModel, name: str, port_type: PortType) -> int:
    if not isinstance(model, DataSource):
        raise ValueError(f"model {model.name()!r} has no named ports")
    index = model.find_port(name, port_type)
    if index < 0:
        raise ValueError(f"model {model.name()!r} has no port called {name!r}")
    return index


class FlowXmlScene:
    """Nodes, their positions and the connections between them."""

    def __init__(self, registry: DataModelRegistry | None = None) -> None:
        self.registry = registry if registry is not None else DataModelRegistry()
        self.nodes: dict[uuid.UUID, Node] = {}
        self.positions: dict[uuid.UUID, Point] = {}
        self.connections: dict[uuid.UUID, Connection] = {}
        self.node_created = Signal()
        self.node_placed = Signal()
        self.connection_created = Signal()

    def create_node(self, model: DataModel, node_id: uuid.UUID | None = None) -> Node:
        """Add a node for ``model`` at the origin."""
        node = Node(model, node_id)
        self.nodes[node.id] = node
        self.positions[node.id] = Point()
        self.node_created.emit(node)
        return node

    def create_connection(
        self,
        node_in: Node,
        port_index_in: int,
        node_out: Node,
        port_index_out: int,
        converter: TypeConverter | None = None,
    ) -> Connection:
        """Connect an output port of ``node_out`` to an input port of ``node_in``."""
        connection = Connection(node_in, port_index_in, node_out, port_index_out, converter)
        node_in.connections.setdefault((PortType.IN, port_index_in), {})[
            connection.id
        ] = connection
        node_out.connections.setdefault((PortType.OUT, port_index_out), {})[
            connection.id
        ] = connection
        self.connections[connection.id] = connection
        self.connection_created.emit(connection)
        return connection

    def clear(self) -> None:
        """Remove every connection and node."""
        for connection in list(self.connections.values()):
            connection.remove_from_nodes()
            connection.close()
        self.connections.clear()
        self.nodes.clear()
        self.positions.clear()

    def save_xml(self) -> str:
        """The scene as an indented XML flow document."""
        root = ET.Element("Flow", {"Version": FLOW_VERSION})
        for node_id, node in self.nodes.items():
            position = self.positions.get(node_id, Point())
            element = ET.SubElement(root, "Node")
            element.set("Id", _format_id(node_id))
            element.set("Type", node.model.name())
            element.set("Designer.Name", _format_id(node_id))
            element.set("Designer.OffsetX", str(int(position.x)))
            element.set("Designer.OffsetY", str(int(position.y)))
            model = node.model
            if isinstance(model, DataSource):
                for name, kind, default in zip(
                    model.internal_ports, model.internal_types, model.internal_defaults
                ):
                    ET.SubElement(
                        element, "Property", {"Name": name, "Type": kind, "Value": default}
                    )

        for connection in self.connections.values():
            source = connection.node(PortType.OUT)
            target = connection.node(PortType.IN)
            if source is None or target is None:
                continue
            source_part = _port_name(
                source.model, PortType.OUT, connection.port_index(PortType.OUT)
            )
            target_part = _port_name(
                target.model, PortType.IN, connection.port_index(PortType.IN)
            )
            ET.SubElement(
                root,
                "Connection",
                {
                    "Source": f"{_format_id(target.id)}.{target_part}",
                    "Target": f"{_format_id(source.id)}.{source_part}",
                    "Type": "Element",
                },
            )

        lines: list[str] = []
        _print_element(root, 0, lines)
        return "\n".join(lines) + "\n"

    def load_xml(self, xml_text: str | bytes) -> None:
        """Add the nodes and connections of a flow document to the scene.

        A document whose root is not ``Flow`` adds nothing.
        """
        root = _parse(xml_text)
        if root.tag != "Flow":
            return

        remapping: dict[str, uuid.UUID] = {}
        for element in root.findall("Node"):
            model_name = element.get("Type", "")
            model = self.registry.create(model_name)
            if model is None:
                raise ValueError(f"No registered model with name {model_name}")
            node_id = _parse_id(element.get("Id"))
            remapping[element.get("Id", "")] = node_id
            node = self.create_node(model, node_id)
            self.positions[node.id] = Point(
                _parse_float(element.get("Designer.OffsetX")),
                _parse_float(element.get("Designer.OffsetY")),
            )
            self.node_placed.emit(node)

        for element in root.findall("Connection"):
            in_key, in_port = self._split_endpoint(element.get("Source", ""))
            out_key, out_port = self._split_endpoint(element.get("Target", ""))
            node_in = self._remapped_node(remapping, in_key)
            node_out = self._remapped_node(remapping, out_key)
            port_index_in = _find_port(node_in.model, in_port, PortType.IN)
            port_index_out = _find_port(node_out.model, out_port, PortType.OUT)
            self.create_connection(node_in, port_index_in, node_out, port_index_out, None)

    @staticmethod
    def _split_endpoint(text: str) -> tuple[str, str]:
        parts = text.split(".")
        if len(parts) < 2:
            raise ValueError(f"connection end {text!r} names no port")
        return parts[0], parts[1]

    def _remapped_node(self, remapping: dict[str, uuid.UUID], key: str) -> Node:
        node_id = remapping.get(key)
        if node_id is None or node_id not in self.nodes:
            raise ValueError(f"connection refers to unknown node {key!r}")
        return self.nodes[node_id]

    def save_file(self, path: str | Path) -> Path:
        """Write the scene to ``path``, adding the flow suffix if it is missing."""
        target = Path(path)
        if not target.name.lower().endswith("flow"):
            target = target.with_name(target.name + FLOW_SUFFIX)
        target.write_text(self.save_xml(), encoding="utf-8")
        return target

    def load_file(self, path: str | Path) -> None:
        """Replace the scene with the flow stored at ``path``.

        The scene is cleared first; a missing file leaves it empty.
        """
        self.clear()
        source = Path(path)
        if not source.is_file():
            return
        self.load_xml(source.read_bytes())


def apply_calculator_style() -> ConnectionStyle:
    """The connection style of the calculator graph."""
    return set_connection_style(_CALCULATOR_STYLE)


def main(argv: list[str] | None = None) -> int:
    """Load model definitions and a flow, then print or store the flow document."""
    parser = argparse.ArgumentParser(
        prog="nodeflow-flow", description="Load and save XML flow documents."
    )
    parser.add_argument("--models", default="flow.xml", help="model definitions file")
    parser.add_argument("flow", nargs="?", help="flow document to load")
    parser.add_argument("--output", help="file to save the flow to")
    args = parser.parse_args(argv)

    apply_calculator_style()
    models_path = Path(args.models)
    if not models_path.is_file():
        parser.error(f"cannot read model definitions from {args.models}")
    try:
        registry = load_model_definitions(models_path.read_bytes())
    except ValueError as exc:
        parser.error(str(exc))

    scene = FlowXmlScene(registry)
    if args.flow:
        try:
            scene.load_file(args.flow)
        except ValueError as exc:
            parser.error(str(exc))

    if args.output:
        written = scene.save_file(args.output)
        print(written)
    else:
        print(scene.save_xml(), end="")
    return 0