# nodeflow

A small framework for node-based dataflow graphs. Each node is driven by a
*data model* that declares typed input and output ports. *Connections*
carry data from an output port of one node to an input port of another,
optionally through a type converter. Scenes of data-described models can be
saved to and loaded from an XML flow document.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

Pillow is required; it is used for colour names in styles and for the
image models.

## What is inside

- `nodeflow.data` – `PortType` and `opposite_port`, `NodeDataType`,
  `NodeData`, `NodeValidationState`, a small `Signal` observer, and the
  `DataModel` base class every node model derives from. Also simple data and
  models: `TextData`, `PixmapData`, `MyNodeData`, `SimpleNodeData`,
  `NaiveDataModel` and `MyDataModel`.
- `nodeflow.geometry` – `Point`, `Rect` and `ConnectionGeometry`: the cubic
  curve from a source (output end) to a sink (input end), its control points
  (`points_c1c2`), bounding box (`bounding_rect`), points along its length
  (`point_at_percent`, `polyline`, `gradient_segments`) and hit testing
  (`hit_test`).
- `nodeflow.style` – `ConnectionStyle`, built from JSON text with
  `from_json`; colours may be names or `[r, g, b]` lists (`parse_color`).
  `normal_color_for` derives a stable colour from a data type id.
  `set_connection_style` and `connection_style` manage the style in use.
- `nodeflow.registry` – `DataModelRegistry`: model factories registered by
  name and category, and type converters registered per pair of data types.
- `nodeflow.connection` – `Node`, `ConnectionState` and `Connection`: how a
  connection is attached, completed, detached, saved as a dictionary, and how
  it passes data on to the input end. `Connection` is a context manager;
  leaving it calls `close`, which sends empty data to the input end.
- `nodeflow.calculator` – `DecimalData` and `IntegerData`, converters between
  them, `MathOperationDataModel` (base for two-input decimal operations),
  `ModuloModel`, `NumberSourceDataModel`, `NumberDisplayDataModel`, and
  `DataSource`, a model whose ports are described by data.
- `nodeflow.demos` – `TextSourceDataModel`, `TextDisplayDataModel`,
  `ImageLoaderModel`, `ImageShowModel`, ready-made registries
  (`text_registry`, `image_registry`, `connection_colors_registry`,
  `styles_registry`) and two preset styles.
- `nodeflow.flow` – `load_model_definitions`, which turns an XML file of
  model definitions into a registry, and `FlowXmlScene`, which holds nodes,
  positions and connections and saves or loads them as XML.

## A model on its own

```python
from nodeflow.calculator import IntegerData, ModuloModel

model = ModuloModel()
model.set_in_data(IntegerData(7), 0)
model.set_in_data(IntegerData(0), 1)
print(model.validation_message())   # Division by zero error

model.set_in_data(IntegerData(3), 1)
print(model.out_data(0).number_as_text())   # 1
```

## Connecting nodes

```python
from nodeflow.connection import Connection, Node
from nodeflow.demos import TextDisplayDataModel, TextSourceDataModel

source = Node(TextSourceDataModel())
display = Node(TextDisplayDataModel())
connection = Connection(display, 0, source, 0)
connection.propagate_data(source.model.out_data(0))
print(display.model.text)   # Default Text
```

`FlowXmlScene.create_connection` does the same and also records the
connection on both nodes, so later `data_updated` signals from the output
model reach the input node.

## A registry

```python
from nodeflow.calculator import ModuloModel
from nodeflow.registry import DataModelRegistry

registry = DataModelRegistry()
registry.register_model(ModuloModel, "Operators")
model = registry.create("Modulo")
```

## Connection style

```python
from nodeflow.style import set_connection_style

style = set_connection_style('{"ConnectionStyle": {"UseDataDefinedColors": true}}')
```

Values missing from the JSON keep their defaults.

## Model definitions and flow documents

A model definitions file has `Node` elements with `Name` and `Category`
attributes. Each `Member` child (`Name`, `Type`, `Default`) becomes a port on
both sides; each `Signal` child with `Type="In"` or `Type="Out"` adds a port
on that side.

```xml
<Models>
    <Node Name="Adder" Category="Arithmetics">
        <Member Name="Value" Type="Int32" Default="0" />
        <Signal Name="Run" Type="In" />
        <Signal Name="Done" Type="Out" />
    </Node>
</Models>
```

A flow document has a `Flow` root with `Node` and `Connection` elements.
`FlowXmlScene.save_xml` writes it, `load_xml` reads it, and `save_file` /
`load_file` do the same with files (`save_file` appends `.flow` when the
name does not already end in `flow`).

## The command

```
nodeflow-flow [--models FILE] [FLOW] [--output FILE]
```

reads model definitions from `--models` (default `flow.xml`), loads the flow
document `FLOW` if one is given, and prints the scene as an XML flow
document, or writes it to `--output` and prints the path written.

## What this package does not do

There is no graphical editor: nothing draws nodes or connections on screen,
and there is no dragging, hovering or selection by mouse. The geometry and
style modules compute curves, bounds and colours, but painting them is left
to the caller. Scenes are stored only as XML flow documents; there is no
JSON scene format.