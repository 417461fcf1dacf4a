"""Number nodes for a calculator graph: data types, converters and models."""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any

from nodeflow.data import (
    DataModel,
    NodeData,
    NodeDataType,
    NodeValidationState,
    PortType,
)

MISSING_INPUTS = "Missing or incorrect inputs"
DIVISION_BY_ZERO = "Division by zero error"


@dataclass(frozen=True)
class DecimalData(NodeData):
    """A floating point number."""

    number: float = 0.0

    def type(self) -> NodeDataType:
        return NodeDataType("decimal", "Decimal")

    def number_as_text(self) -> str:
        return f"{self.number:f}"


@dataclass(frozen=True)
class IntegerData(NodeData):
    """An integer number."""

    number: int = 0

    def type(self) -> NodeDataType:
        return NodeDataType("integer", "Integer")

    def number_as_text(self) -> str:
        return str(self.number)


def _parse_double(text: str) -> float | None:
    """Read a decimal number, or None if ``text`` is not one."""
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return None
    try:
        return float(stripped)
    except ValueError:
        return None


def _truncated_remainder(dividend: int, divisor: int) -> int:
    """Remainder whose sign follows the dividend."""
    remainder = abs(dividend) % abs(divisor)
    return -remainder if dividend < 0 else remainder


class DecimalToIntegerConverter:
    """Turns decimal data into integer data by truncation."""

    def __init__(self) -> None:
        self._integer: IntegerData | None = None

    def __call__(self, data: NodeData | None) -> NodeData | None:
        if isinstance(data, DecimalData):
            self._integer = IntegerData(int(data.number))
        else:
            self._integer = None
        return self._integer


class IntegerToDecimalConverter:
    """Turns integer data into decimal data."""

    def __init__(self) -> None:
        self._decimal: DecimalData | None = None

    def __call__(self, data: NodeData | None) -> NodeData | None:
        if isinstance(data, IntegerData):
            self._decimal = DecimalData(float(data.number))
        else:
            self._decimal = None
        return self._decimal


class MathOperationDataModel(DataModel):
    """Two decimal inputs, one decimal output; subclasses define ``compute``."""

    def __init__(self) -> None:
        super().__init__()
        self._number1: DecimalData | None = None
        self._number2: DecimalData | None = None
        self._result: DecimalData | None = None
        self._validation_state = NodeValidationState.WARNING
        self._validation_message = MISSING_INPUTS

    def n_ports(self, port_type: PortType) -> int:
        return 2 if port_type is PortType.IN else 1

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return DecimalData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return self._result

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        number = data if isinstance(data, DecimalData) else None
        if port_index == 0:
            self._number1 = number
        else:
            self._number2 = number
        self.compute()

    @abstractmethod
    def compute(self) -> None:
        """Recalculate the result from the current inputs."""

    def validation_state(self) -> NodeValidationState:
        return self._validation_state

    def validation_message(self) -> str:
        return self._validation_message


class ModuloModel(DataModel):
    """Integer remainder of a dividend and a divisor."""

    def __init__(self) -> None:
        super().__init__()
        self._number1: IntegerData | None = None
        self._number2: IntegerData | None = None
        self._result: IntegerData | None = None
        self._validation_state = NodeValidationState.WARNING
        self._validation_message = MISSING_INPUTS

    def caption(self) -> str:
        return "Modulo"

    def caption_visible(self) -> bool:
        return True

    def port_caption_visible(self, port_type: PortType, port_index: int) -> bool:
        return True

    def port_caption(self, port_type: PortType, port_index: int) -> str:
        if port_type is PortType.IN:
            if port_index == 0:
                return "Dividend"
            if port_index == 1:
                return "Divisor"
        elif port_type is PortType.OUT:
            return "Result"
        return ""

    def name(self) -> str:
        return "Modulo"

    def save(self) -> dict[str, Any]:
        return {"name": self.name()}

    def n_ports(self, port_type: PortType) -> int:
        return 2 if port_type is PortType.IN else 1

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return IntegerData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return self._result

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        number = data if isinstance(data, IntegerData) else None
        if port_index == 0:
            self._number1 = number
        else:
            self._number2 = number

        n1, n2 = self._number1, self._number2
        if n2 is not None and n2.number == 0:
            self._validation_state = NodeValidationState.ERROR
            self._validation_message = DIVISION_BY_ZERO
            self._result = None
        elif n1 is not None and n2 is not None:
            self._validation_state = NodeValidationState.VALID
            self._validation_message = ""
            self._result = IntegerData(_truncated_remainder(n1.number, n2.number))
        else:
            self._validation_state = NodeValidationState.WARNING
            self._validation_message = MISSING_INPUTS
            self._result = None

        self.data_updated.emit(0)

    def validation_state(self) -> NodeValidationState:
        return self._validation_state

    def validation_message(self) -> str:
        return self._validation_message


class NumberDisplayDataModel(DataModel):
    """Shows the decimal number arriving on its single input."""

    def __init__(self) -> None:
        super().__init__()
        self.text = ""
        self._validation_state = NodeValidationState.WARNING
        self._validation_message = MISSING_INPUTS

    def caption(self) -> str:
        return "Result"

    def caption_visible(self) -> bool:
        return False

    def name(self) -> str:
        return "Result"

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 1
        if port_type is PortType.OUT:
            return 0
        return 1

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return DecimalData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return None

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        if isinstance(data, DecimalData):
            self._validation_state = NodeValidationState.VALID
            self._validation_message = ""
            self.text = data.number_as_text()
        else:
            self._validation_state = NodeValidationState.WARNING
            self._validation_message = MISSING_INPUTS
            self.text = ""

    def validation_state(self) -> NodeValidationState:
        return self._validation_state

    def validation_message(self) -> str:
        return self._validation_message


class NumberSourceDataModel(DataModel):
    """Offers the decimal number typed into its text field."""

    def __init__(self) -> None:
        super().__init__()
        self._number: DecimalData | None = None
        self._text = ""
        self.set_text("0.0")

    @property
    def text(self) -> str:
        return self._text

    def caption(self) -> str:
        return "Number Source"

    def caption_visible(self) -> bool:
        return False

    def name(self) -> str:
        return "NumberSource"

    def save(self) -> dict[str, Any]:
        result = super().save()
        if self._number is not None:
            result["number"] = f"{self._number.number:g}"
        return result

    def restore(self, data: dict[str, Any]) -> None:
        if "number" not in data:
            return
        value = data["number"]
        text = value if isinstance(value, str) else ""
        number = _parse_double(text)
        if number is not None:
            self._number = DecimalData(number)
            self.set_text(text)

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 0
        return 1

    def set_text(self, text: str) -> None:
        """Change the field's text; a change updates or invalidates the output."""
        if text == self._text:
            return
        self._text = text
        number = _parse_double(text)
        if number is not None:
            self._number = DecimalData(number)
            self.data_updated.emit(0)
        else:
            self.data_invalidated.emit(0)

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        return DecimalData().type()

    def out_data(self, port_index: int) -> NodeData | None:
        return self._number

    def set_in_data(self, data: NodeData | None, port_index: int) -> None:
        """A source has no inputs."""


class DataSource(NumberSourceDataModel):
    """A model described by data: shared member ports plus in and out signals.

    Member ports come first on both sides; signal ports follow them.
    """

    def __init__(
        self,
        internal_name: str = "",
        *,
        ports: list[str] | None = None,
        types: list[str] | None = None,
        defaults: list[str] | None = None,
        data: list[NodeData | None] | None = None,
        ports_in: list[str] | None = None,
        types_in: list[str] | None = None,
        defaults_in: list[str] | None = None,
        data_in: list[NodeData | None] | None = None,
        ports_out: list[str] | None = None,
        types_out: list[str] | None = None,
        defaults_out: list[str] | None = None,
        data_out: list[NodeData | None] | None = None,
    ) -> None:
        self.internal_name = internal_name
        self.internal_ports = list(ports or [])
        self.internal_types = list(types or [])
        self.internal_defaults = list(defaults or [])
        self.internal_data = list(data or [])
        self.internal_ports_in = list(ports_in or [])
        self.internal_types_in = list(types_in or [])
        self.internal_defaults_in = list(defaults_in or [])
        self.internal_data_in = list(data_in or [])
        self.internal_ports_out = list(ports_out or [])
        self.internal_types_out = list(types_out or [])
        self.internal_defaults_out = list(defaults_out or [])
        self.internal_data_out = list(data_out or [])
        super().__init__()

    def name(self) -> str:
        return self.internal_name

    def caption(self) -> str:
        return self.internal_name

    def caption_visible(self) -> bool:
        return True

    def find_port(self, name: str, port_type: PortType) -> int:
        """Index of the port called ``name`` on the given side, or -1."""
        if name in self.internal_ports:
            return self.internal_ports.index(name)
        extra: list[str] = []
        if port_type is PortType.IN:
            extra = self.internal_ports_in
        elif port_type is PortType.OUT:
            extra = self.internal_ports_out
        if name in extra:
            return len(self.internal_ports) + extra.index(name)
        return -1

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return len(self.internal_ports) + len(self.internal_ports_in)
        if port_type is PortType.OUT:
            return len(self.internal_ports) + len(self.internal_ports_out)
        raise ValueError("a data source has no ports of type NONE")

    def data_type(self, port_type: PortType, port_index: int) -> NodeDataType:
        if port_index < 0:
            raise IndexError(f"invalid port index {port_index}")
        shared = len(self.internal_types)
        if port_index < shared:
            return NodeDataType(
                self.internal_types[port_index], self.internal_ports[port_index]
            )
        index = port_index - shared
        if port_type is PortType.IN:
            return NodeDataType(self.internal_types_in[index], self.internal_ports_in[index])
        return NodeDataType(self.internal_types_out[index], self.internal_ports_out[index])

    def out_data(self, port_index: int) -> NodeData | None:
        if port_index < 0:
            raise IndexError(f"invalid port index {port_index}")
        shared = len(self.internal_types)
        if port_index >= shared:
            return self.internal_data_out[port_index - shared]
        return self.internal_data[port_index]