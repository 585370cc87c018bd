"""
xdtsync.host - In-memory compositing project.

Models the slice of a compositing host that timesheet synchronization
touches: folders, footage (cels), compositions, layers, effects and
animated properties with keyframes. Projects are loaded from and saved to
a JSON document.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any

from xdtsync.exceptions import HostError, ProjectError
from xdtsync.io import read_json, write_json

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


class KeyframeInterpolation(str, Enum):
    """Interpolation applied on one side of a keyframe."""

    LINEAR = "linear"
    HOLD = "hold"


class Keyframe:
    """A single key on an animated property."""

    def __init__(
        self,
        time: float,
        value: float,
        in_interpolation: KeyframeInterpolation = KeyframeInterpolation.LINEAR,
        out_interpolation: KeyframeInterpolation = KeyframeInterpolation.LINEAR,
    ) -> None:
        self.time = time
        self.value = value
        self.in_interpolation = in_interpolation
        self.out_interpolation = out_interpolation

    @property
    def is_hold(self) -> bool:
        return (
            self.in_interpolation == KeyframeInterpolation.HOLD
            and self.out_interpolation == KeyframeInterpolation.HOLD
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "value": self.value,
            "in_interpolation": self.in_interpolation.value,
            "out_interpolation": self.out_interpolation.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Keyframe:
        return cls(
            time=data["time"],
            value=data["value"],
            in_interpolation=KeyframeInterpolation(data.get("in_interpolation", "linear")),
            out_interpolation=KeyframeInterpolation(data.get("out_interpolation", "linear")),
        )


class AnimatedProperty:
    """A property that holds either a static value or a list of keys."""

    def __init__(self, name: str, value: float = 0.0) -> None:
        self.name = name
        self.value = value
        self.keys: list[Keyframe] = []

    @property
    def num_keys(self) -> int:
        return len(self.keys)

    @property
    def points(self) -> list[tuple[float, float]]:
        return [(k.time, k.value) for k in self.keys]

    def set_values_at_times(self, times: list[float], values: list[float]) -> None:
        """Add keys at the given times, replacing the value of existing keys.

        Keys stay sorted by time. New keys are linear on both sides.

        Raises:
            HostError: If times and values differ in length
        """
        if len(times) != len(values):
            raise HostError(
                f"Property `{self.name}`: got {len(times)} time(s) and {len(values)} value(s)"
            )

        for time, value in zip(times, values):
            key_times = [k.time for k in self.keys]
            index = bisect.bisect_left(key_times, time)
            if index < len(self.keys) and self.keys[index].time == time:
                self.keys[index].value = value
            else:
                self.keys.insert(index, Keyframe(time, value))

    def set_interpolation_type_at_key(
        self,
        index: int,
        in_type: KeyframeInterpolation,
        out_type: KeyframeInterpolation | None = None,
    ) -> None:
        """Set the interpolation of the key at `index` (0-based)."""
        if not 0 <= index < len(self.keys):
            raise HostError(f"Property `{self.name}` has no key at index {index}")
        key = self.keys[index]
        key.in_interpolation = in_type
        key.out_interpolation = out_type if out_type is not None else in_type

    def value_at_time(self, time: float) -> float:
        """Evaluate the property at `time`.

        Before the first key the first key's value holds; hold keys keep
        their value until the next key, linear keys blend toward it.
        """
        if not self.keys:
            return self.value
        if time <= self.keys[0].time:
            return self.keys[0].value

        key_times = [k.time for k in self.keys]
        index = bisect.bisect_right(key_times, time) - 1
        key = self.keys[index]
        if index == len(self.keys) - 1:
            return key.value

        nxt = self.keys[index + 1]
        if (
            key.out_interpolation == KeyframeInterpolation.HOLD
            or nxt.in_interpolation == KeyframeInterpolation.HOLD
        ):
            return key.value
        ratio = (time - key.time) / (nxt.time - key.time)
        return key.value + (nxt.value - key.value) * ratio

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "keys": [k.to_dict() for k in self.keys]}

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> AnimatedProperty:
        prop = cls(name, data.get("value", 0.0))
        prop.keys = [Keyframe.from_dict(k) for k in data.get("keys", [])]
        return prop


# Effects the host knows how to add: static settings and animated properties.
EFFECT_TEMPLATES: dict[str, dict[str, Any]] = {
    "Timewarp": {
        "settings": {"method": 0, "adjust_time_by": 1},
        "properties": {"source_frame": 0.0},
    },
}

TIMEWARP_WHOLE_FRAMES = 1
TIMEWARP_ADJUST_BY_SOURCE_FRAME = 2


class Effect:
    """An effect instance applied to a layer."""

    def __init__(
        self,
        name: str,
        settings: dict[str, Any] | None = None,
        properties: dict[str, AnimatedProperty] | None = None,
    ) -> None:
        self.name = name
        self.settings = settings or {}
        self.properties = properties or {}

    @classmethod
    def create(cls, name: str) -> Effect:
        template = EFFECT_TEMPLATES.get(name)
        if template is None:
            raise HostError(f"Unknown effect `{name}`")
        return cls(
            name,
            dict(template["settings"]),
            {p: AnimatedProperty(p, v) for p, v in template["properties"].items()},
        )

    def get_property(self, name: str) -> AnimatedProperty:
        if name not in self.properties:
            raise HostError(f"Effect `{self.name}` has no property `{name}`")
        return self.properties[name]

    def set_value(self, setting: str, value: Any) -> None:
        if setting not in self.settings:
            raise HostError(f"Effect `{self.name}` has no setting `{setting}`")
        self.settings[setting] = value

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "settings": dict(self.settings),
            "properties": {n: p.to_dict() for n, p in self.properties.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Effect:
        return cls(
            data["name"],
            dict(data.get("settings", {})),
            {
                n: AnimatedProperty.from_dict(n, p)
                for n, p in data.get("properties", {}).items()
            },
        )


class Item:
    """Base class for project items."""

    type_name = "item"

    def __init__(self, item_id: int, name: str) -> None:
        self.id = item_id
        self.name = name
        self.parent: FolderItem | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type_name, "name": self.name}


class FolderItem(Item):
    type_name = "folder"

    def __init__(self, item_id: int, name: str) -> None:
        super().__init__(item_id, name)
        self.items: list[Item] = []

    def add(self, item: Item) -> Item:
        item.parent = self
        self.items.append(item)
        return item

    def walk(self) -> Iterator[Item]:
        for item in self.items:
            yield item
            if isinstance(item, FolderItem):
                yield from item.walk()

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["items"] = [i.to_dict() for i in self.items]
        return data


class FootageItem(Item):
    """A source clip, such as a cel image sequence."""

    type_name = "footage"

    def __init__(
        self,
        item_id: int,
        name: str,
        width: int,
        height: int,
        pixel_aspect: float = 1.0,
        frame_rate: float = 24.0,
        duration: float = 0.0,
        loop: int = 1,
    ) -> None:
        super().__init__(item_id, name)
        self.width = width
        self.height = height
        self.pixel_aspect = pixel_aspect
        self.frame_rate = frame_rate
        self.duration = duration
        self.loop = loop

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            width=self.width,
            height=self.height,
            pixel_aspect=self.pixel_aspect,
            frame_rate=self.frame_rate,
            duration=self.duration,
            loop=self.loop,
        )
        return data


class Layer:
    """A layer in a composition, referencing a footage item."""

    def __init__(self, source: FootageItem) -> None:
        self.source = source
        self.start_time = 0.0
        self.in_point = 0.0
        self.out_point = source.duration
        self.effects: list[Effect] = []
        self.opacity = AnimatedProperty("opacity", 100.0)

    def add_effect(self, name: str) -> Effect:
        effect = Effect.create(name)
        self.effects.append(effect)
        return effect

    def effect(self, name: str) -> Effect:
        for effect in self.effects:
            if effect.name == name:
                return effect
        raise HostError(f"Layer `{self.source.name}` has no effect `{name}`")

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source.id,
            "start_time": self.start_time,
            "in_point": self.in_point,
            "out_point": self.out_point,
            "opacity": self.opacity.to_dict(),
            "effects": [e.to_dict() for e in self.effects],
        }


class CompItem(Item):
    """An output composition."""

    type_name = "comp"

    def __init__(
        self,
        item_id: int,
        name: str,
        width: int,
        height: int,
        pixel_aspect: float,
        duration: float,
        frame_rate: float,
    ) -> None:
        super().__init__(item_id, name)
        self.width = width
        self.height = height
        self.pixel_aspect = pixel_aspect
        self.duration = duration
        self.frame_rate = frame_rate
        self.layers: list[Layer] = []

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    def layer(self, index: int) -> Layer:
        if not 0 <= index < len(self.layers):
            raise HostError(f"Composition `{self.name}` has no layer at index {index}")
        return self.layers[index]

    def add_layer(self, source: FootageItem) -> Layer:
        """Add a layer for `source` on top of the layer stack."""
        layer = Layer(source)
        self.layers.insert(0, layer)
        return layer

    def remove_layer(self, layer: Layer) -> None:
        self.layers.remove(layer)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            width=self.width,
            height=self.height,
            pixel_aspect=self.pixel_aspect,
            duration=self.duration,
            frame_rate=self.frame_rate,
            layers=[layer.to_dict() for layer in self.layers],
        )
        return data


class HostProject:
    """Root of an in-memory compositing project."""

    def __init__(self, name: str = "Untitled") -> None:
        self.name = name
        self.root = FolderItem(0, "Root")
        self.history: list[str] = []
        self._open_groups: list[str] = []
        self._next_id = 1

    @property
    def items(self) -> list[Item]:
        return self.root.items

    def _allocate_id(self) -> int:
        item_id = self._next_id
        self._next_id += 1
        return item_id

    def _parent(self, parent: FolderItem | None) -> FolderItem:
        return parent if parent is not None else self.root

    def add_folder(self, name: str, parent: FolderItem | None = None) -> FolderItem:
        folder = FolderItem(self._allocate_id(), name)
        self._parent(parent).add(folder)
        return folder

    def add_footage(
        self, name: str, width: int, height: int, parent: FolderItem | None = None, **kwargs: Any
    ) -> FootageItem:
        footage = FootageItem(self._allocate_id(), name, width, height, **kwargs)
        self._parent(parent).add(footage)
        return footage

    def add_comp(
        self,
        name: str,
        width: int,
        height: int,
        pixel_aspect: float,
        duration: float,
        frame_rate: float,
        parent: FolderItem | None = None,
    ) -> CompItem:
        comp = CompItem(
            self._allocate_id(), name, width, height, pixel_aspect, duration, frame_rate
        )
        self._parent(parent).add(comp)
        return comp

    @property
    def in_undo_group(self) -> bool:
        return bool(self._open_groups)

    @contextmanager
    def undo_group(self, name: str) -> Iterator[None]:
        """Group every mutation made inside the block into one undo step.

        The group is closed even when the block raises; changes made
        before the failure remain applied.
        """
        self._open_groups.append(name)
        logger.debug("Begin undo group: %s", name)
        try:
            yield
        finally:
            self._open_groups.pop()
            self.history.append(name)
            logger.debug("End undo group: %s", name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": DOCUMENT_VERSION,
            "name": self.name,
            "history": list(self.history),
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostProject:
        project = cls(data.get("name", "Untitled"))
        project.history = list(data.get("history", []))
        pending_layers: list[tuple[CompItem, list[dict[str, Any]]]] = []

        def build(item_data: dict[str, Any], parent: FolderItem) -> None:
            item_id = item_data["id"]
            item_type = item_data["type"]
            name = item_data["name"]
            if item_type == "folder":
                item: Item = FolderItem(item_id, name)
                parent.add(item)
                for child in item_data.get("items", []):
                    build(child, item)
            elif item_type == "footage":
                item = FootageItem(
                    item_id,
                    name,
                    item_data["width"],
                    item_data["height"],
                    item_data.get("pixel_aspect", 1.0),
                    item_data.get("frame_rate", 24.0),
                    item_data.get("duration", 0.0),
                    item_data.get("loop", 1),
                )
                parent.add(item)
            elif item_type == "comp":
                item = CompItem(
                    item_id,
                    name,
                    item_data["width"],
                    item_data["height"],
                    item_data.get("pixel_aspect", 1.0),
                    item_data["duration"],
                    item_data["frame_rate"],
                )
                parent.add(item)
                pending_layers.append((item, item_data.get("layers", [])))
            else:
                raise HostError(f"Unknown item type `{item_type}` for `{name}`")

        for item_data in data.get("items", []):
            build(item_data, project.root)

        footage: dict[int, FootageItem] = {}
        for item in project.root.walk():
            project._next_id = max(project._next_id, item.id + 1)
            if isinstance(item, FootageItem):
                footage[item.id] = item

        for comp, layers in pending_layers:
            for layer_data in layers:
                source = footage.get(layer_data["source_id"])
                if source is None:
                    raise HostError(
                        f"Layer in `{comp.name}` references missing footage "
                        f"{layer_data['source_id']}"
                    )
                layer = Layer(source)
                layer.start_time = layer_data.get("start_time", 0.0)
                layer.in_point = layer_data.get("in_point", 0.0)
                layer.out_point = layer_data.get("out_point", source.duration)
                layer.opacity = AnimatedProperty.from_dict(
                    "opacity", layer_data.get("opacity", {"value": 100.0})
                )
                layer.effects = [Effect.from_dict(e) for e in layer_data.get("effects", [])]
                comp.layers.append(layer)

        return project


def get_sub_item(
    collection: FolderItem | HostProject,
    predicate: Callable[[Item], bool],
    on_missing: Callable[[], Any] | None = None,
    on_duplicates: Callable[[], Any] | None = None,
) -> Any:
    """Return the single direct child of `collection` matching `predicate`.

    When nothing or more than one item matches, the matching handler's
    result is returned instead; without a handler a ProjectError is raised.
    """
    items = collection.items
    results = [item for item in items if predicate(item)]

    if not results:
        if on_missing is None:
            raise ProjectError(f"Could not find item inside of parent folder `{collection.name}`.")
        return on_missing()

    if len(results) > 1:
        if on_duplicates is None:
            raise ProjectError(
                f"Found too many copies of item inside of parent folder `{collection.name}`. "
                "Ensure there is only one copy."
            )
        return on_duplicates()

    return results[0]


def load_project(path: Path) -> HostProject:
    """Load a project document from a JSON file."""
    try:
        data = read_json(path)
    except FileNotFoundError as e:
        raise ProjectError(f"Project file not found: {path}") from e
    except ValueError as e:
        raise ProjectError(f"Project file `{path.name}` is not valid JSON: {e}") from e

    try:
        return HostProject.from_dict(data)
    except (KeyError, TypeError) as e:
        raise ProjectError(f"Project file `{path.name}` is malformed: missing {e}") from e


def save_project(project: HostProject, path: Path) -> None:
    """Save a project document to a JSON file."""
    write_json(path, project.to_dict())
