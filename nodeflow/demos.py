"""Text and image demo models, and the registries and styles of the demo graphs."""

from __future__ import annotations

from PIL import Image

from nodeflow.connection import Node  # noqa: F401  (re-exported for graph building)
from nodeflow.data import (
    DataModel,
    MyDataModel,
    NaiveDataModel,
    NodeData,
    NodeDataType,
    PixmapData,
    PortType,
    TextData,
)
from nodeflow.registry import DataModelRegistry
from nodeflow.style import ConnectionStyle, set_connection_style

LABEL_SIZE = 200

_CONNECTION_COLORS_STYLE = """
{
  "ConnectionStyle": {
    "UseDataDefinedColors": true
  }
}
"""

_STYLES_EXAMPLE_STYLE = """
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

    "UseDataDefinedColors": false
  }
}
"""


def _scaled(image: Image.Image | None, width: int, height: int) -> Image.Image | None:
    """``image`` resized to fit ``width`` x ``height`` keeping its aspect ratio."""
    if image is None or width <= 0 or height <= 0:
        return None
    image_width, image_height = image.size
    if image_width == 0 or image_height == 0:
        return None
    factor = min(width / image_width, height / image_height)
    size = (max(1, round(image_width * factor)), max(1, round(image_height * factor)))
    return image.resize(size)


class _ImageLabel:
    """A fixed-size area showing an image scaled to fit it."""

    def _init_label(self, text: str) -> None:
        self.label_text = text
        self.label_width = LABEL_SIZE
        self.label_height = LABEL_SIZE
        self._shown: Image.Image | None = None

    def _show(self, image: Image.Image | None) -> None:
        self._shown = _scaled(image, self.label_width, self.label_height)

    def display_image(self) -> Image.Image | None:
        """The image as currently shown, scaled to the label, or None."""
        return self._shown


class TextSourceDataModel(DataModel):
    """Offers the text typed into its field on a single output."""

    def __init__(self) -> None:
        super().__init__()
        self.text = "Default Text"

    def caption(self) -> str:
        return "Text Source"

    def caption_visible(self) -> bool:
        return False

    def name(self) -> str:
        return "TextSourceDataModel"

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 0
        return 1

    def set_text(self, text: str) -> None:
        """Edit the field; the output is announced as updated."""
        self.text = text
        self.data_updated.emit(0)

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return TextData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return TextData(self.text)

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """A source has no inputs."""


class TextDisplayDataModel(DataModel):
    """Shows the text arriving on its single input."""

    def __init__(self) -> None:
        super().__init__()
        self.text = "Resulting Text"

    def caption(self) -> str:
        return "Text Display"

    def caption_visible(self) -> bool:
        return False

    def name(self) -> str:
        return "TextDisplayDataModel"

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.OUT:
            return 0
        return 1

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return TextData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return None

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        self.text = data.text if isinstance(data, TextData) else ""


class ImageLoaderModel(_ImageLabel, DataModel):
    """Offers an image loaded from a file on a single output."""

    def __init__(self) -> None:
        DataModel.__init__(self)
        self._init_label("Double click to load image")
        self._pixmap: Image.Image | None = None

    def caption(self) -> str:
        return "Image Source"

    def name(self) -> str:
        return "ImageLoaderModel"

    def model_name(self) -> str:
        return "Source Image"

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 0
        return 1

    def load(self, path: str) -> Image.Image | None:
        """Load the image at ``path``; an unreadable file leaves no image.

        The output is announced as updated either way.
        """
        try:
            with Image.open(path) as image:
                image.load()
                self._pixmap = image.copy()
        except (OSError, ValueError):
            self._pixmap = None
        self._show(self._pixmap)
        self.data_updated.emit(0)
        return self._pixmap

    def resize_label(self, width: int, height: int) -> None:
        """Change the display area; a loaded image is rescaled to it."""
        self.label_width = width
        self.label_height = height
        if self._pixmap is not None:
            self._show(self._pixmap)

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return PixmapData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return PixmapData(self._pixmap)

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """A source has no inputs."""

    def resizable(self) -> bool:
        return True


class ImageShowModel(_ImageLabel, DataModel):
    """Shows the image arriving on its input and passes it on."""

    def __init__(self) -> None:
        DataModel.__init__(self)
        self._init_label("Image will appear here")
        self._node_data: NodeData | None = None

    def caption(self) -> str:
        return "Image Display"

    def name(self) -> str:
        return "ImageShowModel"

    def model_name(self) -> str:
        return "Resulting Image"

    def n_ports(self, port_type: PortType) -> int:
        return 1

    def resize_label(self, width: int, height: int) -> None:
        """Change the display area; a shown image is rescaled to it."""
        self.label_width = width
        self.label_height = height
        if isinstance(self._node_data, PixmapData):
            self._show(self._node_data.pixmap)

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return PixmapData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return self._node_data

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        if data is not None and not isinstance(data, PixmapData):
            raise TypeError(f"expected image data, got {type(data).__name__}")
        self._node_data = data
        self._show(data.pixmap if data is not None else None)
        self.data_updated.emit(0)

    def display_image(self) -> Image.Image | None:
        """The incoming image as currently shown, scaled to the label, or None."""
        return self._shown

    def resizable(self) -> bool:
        return True


def text_registry() -> DataModelRegistry:
    """Models of the text source and display graph."""
    registry = DataModelRegistry()
    registry.register_model(TextSourceDataModel)
    registry.register_model(TextDisplayDataModel)
    return registry


def image_registry() -> DataModelRegistry:
    """Models of the image loading and display graph."""
    registry = DataModelRegistry()
    registry.register_model(ImageShowModel)
    registry.register_model(ImageLoaderModel)
    return registry


def connection_colors_registry() -> DataModelRegistry:
    """Models of the graph showing data-defined connection colours."""
    registry = DataModelRegistry()
    registry.register_model(NaiveDataModel)
    return registry


def styles_registry() -> DataModelRegistry:
    """Models of the styling example graph."""
    registry = DataModelRegistry()
    registry.register_model(MyDataModel)
    return registry


def apply_connection_colors_style() -> ConnectionStyle:
    """Colour connections by the data type they carry."""
    return set_connection_style(_CONNECTION_COLORS_STYLE)


def apply_styles_example_style() -> ConnectionStyle:
    """The connection style of the styling example."""
    return set_connection_style(_STYLES_EXAMPLE_STYLE)