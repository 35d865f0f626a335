"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, MutableMapping

from ..core.labels import is_one_hot
from ..core.types import Batch

SPLITS = ("train", "val", "test")


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Number of input features.
    d_out:
        Width of the one-hot targets as consumed by the network.
    task_type:
        Only ``"multiclass"`` is produced by the built-in loaders.
    num_classes:
        Number of discrete classes.
    normalization:
        Metadata describing normalization applied to the inputs. The registry
        does not interpret these values but keeping them makes runs
        reproducible.
    extra:
        Free-form metadata, for example the original class names.
    """

    d_in: int
    d_out: int
    task_type: str = "multiclass"
    num_classes: int | None = None
    normalization: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """Description of a dataset registered in the system."""

    name: str
    splits: Mapping[str, Batch]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    def split(self, name: str) -> Batch:
        """Return the full ``name`` split as a single batch."""

        if name not in self.splits:
            raise ValueError(f"Unknown split: {name}")
        return self.splits[name]

    @property
    def sizes(self) -> Dict[str, int]:
        return {name: len(batch) for name, batch in self.splits.items()}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("iris")
        def make_iris(**kwargs):
            ...

    or directly::

        register_dataset("iris", make_iris)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the validated :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset: {dataset}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.task_type != "multiclass":
        raise ValueError(f"Invalid task type: {spec.data_spec.task_type}")
    if spec.data_spec.num_classes is None:
        raise ValueError("Multiclass datasets must define num_classes")
    if "train" not in spec.splits or len(spec.splits["train"]) == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty train split")
    for split, batch in spec.splits.items():
        if split not in SPLITS:
            raise ValueError(f"Unknown split name {split!r}")
        if batch.inputs.shape[0] != batch.targets.shape[0]:
            raise ValueError(
                f"Split {split!r} has {batch.inputs.shape[0]} inputs but "
                f"{batch.targets.shape[0]} targets"
            )
        if batch.inputs.shape[0] == 0:
            continue
        if batch.inputs.shape[1] != spec.data_spec.d_in:
            raise ValueError(f"Split {split!r} does not have d_in={spec.data_spec.d_in}")
        if batch.targets.shape[1] != spec.data_spec.num_classes:
            raise ValueError(
                f"Split {split!r} targets are not {spec.data_spec.num_classes} wide"
            )
        if not is_one_hot(batch.targets):
            raise ValueError(f"Split {split!r} targets are not strictly one-hot")


__all__ = [
    "Batch",
    "DataSpec",
    "DatasetSpec",
    "SPLITS",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
