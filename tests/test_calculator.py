import pytest

from nodeflow.calculator import (
    DataSource,
    DecimalData,
    DecimalToIntegerConverter,
    IntegerData,
    IntegerToDecimalConverter,
    MathOperationDataModel,
    ModuloModel,
    NumberDisplayDataModel,
    NumberSourceDataModel,
)
from nodeflow.data import NodeDataType, NodeValidationState, PortType, TextData


class _Adder(MathOperationDataModel):
    def caption(self):
        return "Addition"

    def name(self):
        return "Addition"

    def compute(self):
        if self._number1 is not None and self._number2 is not None:
            self._result = DecimalData(self._number1.number + self._number2.number)
            self._validation_state = NodeValidationState.VALID
            self._validation_message = ""
        else:
            self._result = None
            self._validation_state = NodeValidationState.WARNING
            self._validation_message = "Missing or incorrect inputs"
        self.data_updated.emit(0)


def _collect(signal):
    calls = []
    signal.connect(lambda *args: calls.append(args))
    return calls


def test_decimal_type_and_text():
    assert DecimalData(1.5).type() == NodeDataType("decimal", "Decimal")
    assert DecimalData(1.5).number_as_text() == "1.500000"


def test_integer_text_round_trips():
    assert int(IntegerData(42).number_as_text()) == 42
    assert IntegerData().type() == IntegerData(5).type()


def test_decimal_to_integer_converter():
    converter = DecimalToIntegerConverter()
    assert converter(DecimalData(4.0)) == IntegerData(4)
    assert converter(IntegerData(4)) is None
    assert converter(None) is None


def test_integer_to_decimal_converter():
    converter = IntegerToDecimalConverter()
    assert converter(IntegerData(3)) == DecimalData(3.0)
    assert converter(DecimalData(3.0)) is None


def test_converters_round_trip_integers():
    to_decimal = IntegerToDecimalConverter()
    to_integer = DecimalToIntegerConverter()
    for value in (-5, 0, 17):
        assert to_integer(to_decimal(IntegerData(value))) == IntegerData(value)


def test_math_operation_ports_and_types():
    model = _Adder()
    assert model.n_ports(PortType.IN) == 2
    assert model.n_ports(PortType.OUT) == 1
    assert model.data_type(PortType.IN, 1) == DecimalData().type()
    assert model.validation_state() is NodeValidationState.WARNING
    assert model.validation_message() == "Missing or incorrect inputs"


def test_math_operation_computes_when_both_inputs_set():
    model = _Adder()
    model.set_in_data(DecimalData(2.0), 0)
    assert model.out_data(0) is None
    model.set_in_data(DecimalData(3.0), 1)
    assert model.out_data(0) == DecimalData(5.0)
    assert model.validation_state() is NodeValidationState.VALID


def test_math_operation_ignores_wrong_data_type():
    model = _Adder()
    model.set_in_data(DecimalData(2.0), 0)
    model.set_in_data(TextData("x"), 1)
    assert model.out_data(0) is None
    assert model.validation_state() is NodeValidationState.WARNING


def test_math_operation_is_abstract():
    with pytest.raises(TypeError):
        MathOperationDataModel()


def test_modulo_captions():
    model = ModuloModel()
    assert model.caption() == "Modulo"
    assert model.name() == "Modulo"
    assert model.port_caption(PortType.IN, 0) == "Dividend"
    assert model.port_caption(PortType.IN, 1) == "Divisor"
    assert model.port_caption(PortType.OUT, 0) == "Result"
    assert model.port_caption(PortType.IN, 2) == ""
    assert model.save() == {"name": "Modulo"}


def test_modulo_ports():
    model = ModuloModel()
    assert model.n_ports(PortType.IN) == 2
    assert model.n_ports(PortType.OUT) == 1
    assert model.data_type(PortType.OUT, 0) == IntegerData().type()


def test_modulo_result():
    model = ModuloModel()
    updates = _collect(model.data_updated)
    model.set_in_data(IntegerData(7), 0)
    model.set_in_data(IntegerData(3), 1)
    assert model.out_data(0) == IntegerData(1)
    assert model.validation_state() is NodeValidationState.VALID
    assert model.validation_message() == ""
    assert updates == [(0,), (0,)]


def test_modulo_sign_follows_dividend():
    model = ModuloModel()
    model.set_in_data(IntegerData(-7), 0)
    model.set_in_data(IntegerData(3), 1)
    assert model.out_data(0) == IntegerData(-1)


def test_modulo_division_by_zero():
    model = ModuloModel()
    model.set_in_data(IntegerData(0), 1)
    assert model.validation_state() is NodeValidationState.ERROR
    assert model.validation_message() == "Division by zero error"
    assert model.out_data(0) is None


def test_modulo_missing_input():
    model = ModuloModel()
    model.set_in_data(IntegerData(5), 0)
    model.set_in_data(DecimalData(2.0), 1)
    assert model.validation_state() is NodeValidationState.WARNING
    assert model.validation_message() == "Missing or incorrect inputs"
    assert model.out_data(0) is None


def test_number_display_shows_decimal():
    model = NumberDisplayDataModel()
    assert model.caption() == "Result"
    assert model.name() == "Result"
    assert model.n_ports(PortType.IN) == 1
    assert model.n_ports(PortType.OUT) == 0
    model.set_in_data(DecimalData(2.5), 0)
    assert model.text == DecimalData(2.5).number_as_text()
    assert model.validation_state() is NodeValidationState.VALID
    model.set_in_data(None, 0)
    assert model.text == ""
    assert model.validation_message() == "Missing or incorrect inputs"
    assert model.out_data(0) is None


def test_number_source_defaults():
    model = NumberSourceDataModel()
    assert model.caption() == "Number Source"
    assert model.name() == "NumberSource"
    assert model.text == "0.0"
    assert model.out_data(0) == DecimalData(0.0)
    assert model.n_ports(PortType.IN) == 0
    assert model.n_ports(PortType.OUT) == 1


def test_number_source_set_text_emits():
    model = NumberSourceDataModel()
    updated = _collect(model.data_updated)
    invalidated = _collect(model.data_invalidated)
    model.set_text("2.5")
    assert model.out_data(0) == DecimalData(2.5)
    model.set_text("abc")
    assert model.out_data(0) == DecimalData(2.5)
    assert updated == [(0,)]
    assert invalidated == [(0,)]


def test_number_source_save_restore_round_trip():
    model = NumberSourceDataModel()
    model.set_text("4.25")
    saved = model.save()
    assert saved["name"] == "NumberSource"
    other = NumberSourceDataModel()
    other.restore(saved)
    assert other.out_data(0) == DecimalData(4.25)
    assert other.text == saved["number"]


def test_number_source_restore_ignores_bad_values():
    model = NumberSourceDataModel()
    model.restore({"number": "not a number"})
    model.restore({"number": 3})
    model.restore({})
    assert model.out_data(0) == DecimalData(0.0)
    assert model.text == "0.0"


def _source():
    return DataSource(
        "CycleInt32",
        ports=["a", "b"],
        types=["int", "float"],
        defaults=["1", "2"],
        data=[DecimalData(1.0), DecimalData(2.0)],
        ports_in=["start"],
        types_in=["Signal"],
        defaults_in=[""],
        data_in=[DecimalData()],
        ports_out=["done", "fail"],
        types_out=["Signal", "Signal"],
        defaults_out=["", ""],
        data_out=[DecimalData(8.0), DecimalData(9.0)],
    )


def test_data_source_names_and_ports():
    source = _source()
    assert source.name() == "CycleInt32"
    assert source.caption() == "CycleInt32"
    assert source.caption_visible() is True
    assert source.n_ports(PortType.IN) == 3
    assert source.n_ports(PortType.OUT) == 4
    with pytest.raises(ValueError):
        source.n_ports(PortType.NONE)


def test_data_source_find_port():
    source = _source()
    assert source.find_port("b", PortType.IN) == 1
    assert source.find_port("start", PortType.IN) == 2
    assert source.find_port("fail", PortType.OUT) == 3
    assert source.find_port("start", PortType.OUT) == -1
    assert source.find_port("missing", PortType.IN) == -1


def test_data_source_data_types():
    source = _source()
    assert source.data_type(PortType.IN, 0) == NodeDataType("int", "a")
    assert source.data_type(PortType.IN, 2) == NodeDataType("Signal", "start")
    assert source.data_type(PortType.OUT, 3) == NodeDataType("Signal", "fail")
    with pytest.raises(IndexError):
        source.data_type(PortType.IN, -1)


def test_data_source_out_data():
    source = _source()
    assert source.out_data(1) == DecimalData(2.0)
    assert source.out_data(2) == DecimalData(8.0)
    assert source.out_data(3) == DecimalData(9.0)
    with pytest.raises(IndexError):
        source.out_data(4)


def test_data_source_find_port_matches_data_type_name():
    source = _source()
    for name in ("a", "b", "done", "fail"):
        index = source.find_port(name, PortType.OUT)
        assert source.data_type(PortType.OUT, index).name == name