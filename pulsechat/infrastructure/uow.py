# pulsechat/infrastructure/uow.py

from typing import Any, Dict, Type


class UoWModel:
    """Proxy around an ORM row; attribute writes mark the row dirty."""

    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # rows waiting for insert are written as a whole on commit
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


class UnitOfWork:
    def __init__(self) -> None:
        self.dirty: Dict[int, Any] = {}
        self.new: Dict[int, Any] = {}
        self.deleted: Dict[int, Any] = {}
        self.mappers: Dict[Type, Any] = {}

    @staticmethod
    def _unwrap(model: Any) -> Any:
        return model._model if isinstance(model, UoWModel) else model

    def wrap(self, model: Any) -> UoWModel:
        return UoWModel(self._unwrap(model), self)

    def register_dirty(self, model: Any) -> None:
        model = self._unwrap(model)
        model_id = id(model)
        if model_id not in self.new:
            self.dirty[model_id] = model

    def register_deleted(self, model: Any) -> None:
        model = self._unwrap(model)
        model_id = id(model)
        if model_id in self.new:
            # never reached the database, nothing to delete
            self.new.pop(model_id)
            return
        self.dirty.pop(model_id, None)
        self.deleted[model_id] = model

    def register_new(self, model: Any) -> UoWModel:
        model = self._unwrap(model)
        self.new[id(model)] = model
        return UoWModel(model, self)

    def _mapper_for(self, model: Any):
        try:
            return self.mappers[type(model)]
        except KeyError:
            raise LookupError(
                f"No data mapper registered for {type(model).__name__}"
            ) from None

    async def commit(self) -> None:
        for model in list(self.new.values()):
            await self._mapper_for(model).insert(model)
        for model in list(self.dirty.values()):
            await self._mapper_for(model).update(model)
        for model in list(self.deleted.values()):
            await self._mapper_for(model).delete(model)
        self.clear()

    def clear(self) -> None:
        self.new.clear()
        self.dirty.clear()
        self.deleted.clear()
