"""Registry of node models and type converters."""

from __future__ import annotations

from typing import Callable

from nodeflow.data import DataModel, NodeData, NodeDataType

ModelCreator = Callable[[], DataModel]
TypeConverter = Callable[[NodeData | None], NodeData | None]

DEFAULT_CATEGORY = "Nodes"


class DataModelRegistry:
    """Known node models by name, their categories and type converters."""

    def __init__(self) -> None:
        self._creators: dict[str, ModelCreator] = {}
        self._model_categories: dict[str, str] = {}
        self._categories: set[str] = set()
        self._converters: dict[tuple[NodeDataType, NodeDataType], TypeConverter] = {}

    def register_model(
        self, creator: ModelCreator, category: str = DEFAULT_CATEGORY
    ) -> None:
        """Register a model factory; a name already registered is kept as is."""
        name = creator().name()
        if name in self._creators:
            return
        self._creators[name] = creator
        self._model_categories[name] = category
        self._categories.add(category)

    def create(self, model_name: str) -> DataModel | None:
        """A new model instance for ``model_name``, or None if it is unknown."""
        creator = self._creators.get(model_name)
        return creator() if creator is not None else None

    @property
    def registered_model_creators(self) -> dict[str, ModelCreator]:
        return dict(self._creators)

    @property
    def registered_models_category_association(self) -> dict[str, str]:
        return dict(self._model_categories)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(sorted(self._categories))

    def register_type_converter(
        self, type_pair: tuple[NodeDataType, NodeDataType], converter: TypeConverter
    ) -> None:
        """Register a converter from ``type_pair[0]`` to ``type_pair[1]``."""
        self._converters[type_pair] = converter

    def get_type_converter(
        self, d1: NodeDataType, d2: NodeDataType
    ) -> TypeConverter | None:
        """The converter from ``d1`` to ``d2``, or None if there is none."""
        return self._converters.get((d1, d2))