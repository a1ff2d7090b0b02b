"""Map generation configuration models."""

from pydantic import BaseModel, Field


class LayerConfig(BaseModel):
    """A single terrain layer in the ordered layer stack.

    Layer 0 is the background and is never grown itself. Higher layers are
    grown on top of the layer directly below them.
    """

    name: str = Field(default="", description="Tile identifier for the renderer")
    saturation: int = Field(
        default=50, ge=0, le=100, description="Chance (%) for a tile to appear"
    )
    distance: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Required margin from the sublayer's boundary",
    )
    variation: float = Field(
        default=0.0,
        ge=0.0,
        le=10.0,
        description="Saturation jitter (plus/minus) between sub-maps",
    )
    iterations: int = Field(
        default=0, ge=0, description="Cellular automaton rounds"
    )


class AutomatonConfig(BaseModel):
    """Neighbour thresholds shared by every layer."""

    birth_limit: int = Field(
        default=4, description="Empty base cells need more neighbours than this"
    )
    death_limit: int = Field(
        default=4, description="Filled base cells need at least this many neighbours"
    )
    birth_limit_extra: int = Field(
        default=4, description="Upper cells need more agreement than this to stay"
    )
    death_limit_extra: int = Field(
        default=4, description="Lower cells with less agreement than this are promoted"
    )


class IslandConfig(BaseModel):
    """Island partitioning parameters."""

    enabled: bool = Field(default=True, description="Run island post-processing")
    main_layer: int = Field(default=1, ge=1, description="Land layer value")
    back_layer: int = Field(default=0, ge=0, description="Background layer value")
    minimum_land_tiles: int = Field(
        default=30, ge=0, description="Minimum number of tiles in an island"
    )
    minimum_water_tiles: int = Field(
        default=20,
        ge=0,
        description="Minimum number of tiles needed to keep a background region",
    )


class ObjectPlacementRule(BaseModel, frozen=True):
    """Rule for scattering one kind of object over a layer."""

    object: str = Field(description="Object identifier for the instantiator")
    layer: int = Field(default=1, ge=0, description="Layer the object spawns on")
    saturation: int = Field(
        default=10, ge=0, le=100, description="Chance (%) of spawning on a cell"
    )
    distance: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Minimum distance between the object and the sublayer",
    )
    exclusive: bool = Field(
        default=True, description="Stop evaluating later rules once this one fires"
    )


def _default_layers() -> list[LayerConfig]:
    return [
        LayerConfig(name="water", saturation=0),
        LayerConfig(name="sand", saturation=48, variation=3.0, iterations=10),
        LayerConfig(name="grass", saturation=60, distance=2, iterations=2),
        LayerConfig(name="hill", saturation=45, distance=3, iterations=1),
    ]


def _default_objects() -> list[ObjectPlacementRule]:
    return [
        ObjectPlacementRule(object="tree", layer=2, saturation=8, distance=1),
        ObjectPlacementRule(object="bush", layer=2, saturation=5, distance=0),
        ObjectPlacementRule(object="rock", layer=3, saturation=4, distance=1),
        ObjectPlacementRule(object="shell", layer=1, saturation=2, distance=0),
    ]


class MapConfig(BaseModel):
    """Complete map generation configuration."""

    seed: int | None = Field(
        default=None, description="Random seed (None = fresh entropy each run)"
    )
    grid_size: int = Field(
        default=2, ge=1, le=4, description="Grid of N x N independent sub-maps"
    )
    sub_width: int = Field(default=50, ge=1, description="Sub-map width in tiles")
    sub_height: int = Field(default=50, ge=1, description="Sub-map height in tiles")

    layers: list[LayerConfig] = Field(default_factory=_default_layers)
    automaton: AutomatonConfig = Field(default_factory=AutomatonConfig)
    islands: IslandConfig = Field(default_factory=IslandConfig)
    objects: list[ObjectPlacementRule] = Field(default_factory=_default_objects)

    @property
    def width(self) -> int:
        """Full grid width in tiles."""
        return self.grid_size * self.sub_width

    @property
    def height(self) -> int:
        """Full grid height in tiles."""
        return self.grid_size * self.sub_height

    @property
    def layer_count(self) -> int:
        return len(self.layers)
