"""
ModelRegistry: binds schemas to one executor and resolves models by name.

Relations refer to their targets by schema name, so every model that takes
part in a relation must be registered in the same registry.
"""

from typing import TYPE_CHECKING, Dict, Iterable, Iterator

from app.orm.model import Model
from app.orm.schema import Schema

if TYPE_CHECKING:
    from app.database import QueryExecutor


class ModelRegistry:
    def __init__(self, executor: "QueryExecutor", schemas: Iterable[Schema] = ()):
        self._executor = executor
        self._models: Dict[str, Model] = {}
        for schema in schemas:
            self.register(schema)

    @property
    def executor(self) -> "QueryExecutor":
        return self._executor

    def register(self, schema: Schema) -> Model:
        if schema.name in self._models:
            raise ValueError(f"Schema '{schema.name}' is already registered")
        model = Model(schema, self._executor, registry=self)
        self._models[schema.name] = model
        return model

    def __getitem__(self, name: str) -> Model:
        try:
            return self._models[name]
        except KeyError:
            raise KeyError(f"No model registered under '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)
