from typing import Any, Dict, Optional, Type


class Hydrator:
    """Object responsible for casting a row from the data layer to a model"""

    fallback: Type[object] = dict
    """The model type that will be used if there is none passed in the
    hydrate method"""

    def hydrate(self, data: Dict[str, Any], model: Optional[Type[Any]] = None):
        """Perform casting operation

        Args:
            data (Dict[str, Any]): Raw row from the source
            model (Type[object], optional): The model that will do the
                casting. Scalar types take the first column. If no value is
                passed, it will use whatever the Hydrator's fallback value is
                set to. Defaults to `None`.

        Returns:
            Any: The data cast into the model
        """
        if model is None:
            model = self.fallback
        if model in (str, int, float, bool):
            return model(next(iter(data.values())))
        if model is dict:
            return dict(data)
        return model(**data)
