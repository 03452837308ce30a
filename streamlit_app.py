from __future__ import annotations

import json

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from terrain_tiles.config import TerrainConfig
from terrain_tiles.grid import TileGrid, generate_grid
from viz.export import (
    alphamap_to_png_bytes,
    array_to_npy_bytes,
    array_to_png_bytes,
    detail_layers_to_png_bytes,
    heightmap_to_obj_bytes,
    stitched_heights,
    trees_to_json_bytes,
)

st.set_page_config(
    page_title="Tiled Terrain",
    page_icon="~",
    layout="wide",
)

_TREE_COLORS = ("#2e7d32", "#9ccc65", "#00695c")


@st.cache_resource(show_spinner="Generating tiles...")
def _grid(params_json: str) -> TileGrid:
    # Keyed on the JSON text so identical sidebars reuse the same grid.
    return generate_grid(TerrainConfig.from_dict(json.loads(params_json)))


def _heatmap(z: np.ndarray, *, colorscale: str, height: int = 560) -> go.Figure:
    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            colorscale=colorscale,
            showscale=True,
            hovertemplate="x=%{x} z=%{y} h=%{z:.4f}<extra></extra>",
            colorbar=dict(thickness=12),
        )
    )
    fig.update_layout(margin=dict(l=0, r=0, t=0, b=0), height=int(height))
    fig.update_yaxes(scaleanchor="x", showgrid=False, zeroline=False)
    fig.update_xaxes(showgrid=False, zeroline=False)
    return fig


def _world_figure(grid: TileGrid, *, show_trees: bool) -> go.Figure:
    c = grid.config
    fig = _heatmap(stitched_heights(grid), colorscale="earth")
    if not show_trees:
        return fig

    # Tree positions are normalized per tile; map them onto mosaic samples.
    span = float(c.heightmap_size - 1)
    for proto, color in enumerate(_TREE_COLORS):
        xs: list[float] = []
        zs: list[float] = []
        for tile in grid:
            for t in tile.trees:
                if t.prototype_index != proto:
                    continue
                xs.append((tile.x + t.position[0]) * span)
                zs.append((tile.z + t.position[2]) * span)
        fig.add_trace(
            go.Scatter(
                x=xs,
                y=zs,
                mode="markers",
                marker=dict(size=4, color=color),
                name=f"tree {proto}",
                hoverinfo="skip",
            )
        )
    return fig


with st.sidebar:
    st.header("Terrain")
    seed = st.number_input("Seed", value=0, step=1)
    tiles_x = st.slider("Tiles X", 1, 4, 2)
    tiles_z = st.slider("Tiles Z", 1, 4, 2)
    terrain_size = st.select_slider("Terrain size", [256, 512, 1024, 2048], value=512)
    terrain_height = st.slider("Terrain height", 64, 1024, 512, step=32)
    heightmap_size = st.select_slider("Heightmap", [33, 65, 129, 257, 513], value=129)
    alphamap_size = st.select_slider("Splat map", [64, 128, 256, 512, 1024], value=256)
    detail_map_size = st.select_slider("Detail map", [64, 128, 256, 512], value=128)

    st.header("Noise")
    ground_frequency = st.number_input("Ground frequency", value=0.001, format="%.4f")
    ground_amplitude = st.slider("Ground amplitude", 0.01, 0.5, 0.1)
    tree_frequency = st.number_input("Tree frequency", value=0.005, format="%.4f")
    detail_frequency = st.number_input("Detail frequency", value=0.01, format="%.4f")

    st.header("Vegetation")
    tree_spacing = st.slider("Tree spacing", 4, 128, 32)
    show_trees = st.checkbox("Show trees", value=True)

params = {
    "seed": int(seed),
    "tiles_x": int(tiles_x),
    "tiles_z": int(tiles_z),
    "terrain_size": int(terrain_size),
    "terrain_height": int(terrain_height),
    "heightmap_size": int(heightmap_size),
    "alphamap_size": int(alphamap_size),
    "detail_map_size": int(detail_map_size),
    "ground_frequency": float(ground_frequency),
    "ground_amplitude": float(ground_amplitude),
    "tree_frequency": float(tree_frequency),
    "detail_frequency": float(detail_frequency),
    "tree_spacing": int(tree_spacing),
}
params_json = json.dumps(params, sort_keys=True)
grid = _grid(params_json)

st.title("Tiled Terrain")
st.caption(
    f"{len(grid)} tiles, {sum(len(t.trees) for t in grid)} trees, "
    f"world offset {grid.offset}"
)

tab_world, tab_tile = st.tabs(["World", "Tile"])

with tab_world:
    st.plotly_chart(
        _world_figure(grid, show_trees=bool(show_trees)),
        use_container_width=True,
        key="world_heights",
    )
    world = stitched_heights(grid)
    c0, c1, c2 = st.columns(3)
    c0.download_button("Heights PNG", array_to_png_bytes(world), "world_height.png")
    c1.download_button("Heights NPY", array_to_npy_bytes(world), "world_height.npy")
    c2.download_button(
        "Config JSON",
        json.dumps(params, indent=2, sort_keys=True),
        "terrain_config.json",
    )

with tab_tile:
    tx = st.number_input("Tile x", 0, int(tiles_x) - 1, 0)
    tz = st.number_input("Tile z", 0, int(tiles_z) - 1, 0)
    tile = grid.tile(int(tx), int(tz))

    col0, col1, col2 = st.columns(3)
    col0.image(array_to_png_bytes(tile.heights), caption="Heights", use_container_width=True)
    col1.image(
        alphamap_to_png_bytes(tile.alphamap),
        caption="Splat (red steep, green flat)",
        use_container_width=True,
    )
    col2.image(
        detail_layers_to_png_bytes(tile.details),
        caption="Detail layers (R/G/B)",
        use_container_width=True,
    )

    neighbors = {
        side: (None if n is None else n.coords)
        for side, n in (
            ("left", tile.left),
            ("right", tile.right),
            ("top", tile.top),
            ("bottom", tile.bottom),
        )
    }
    st.json({"position": tile.position, "trees": len(tile.trees), "neighbors": neighbors})

    d0, d1 = st.columns(2)
    d0.download_button(
        "Tile OBJ",
        heightmap_to_obj_bytes(
            tile.heights,
            size=float(grid.config.terrain_size),
            z_scale=float(grid.config.terrain_height),
        ),
        f"tile_{tile.x}_{tile.z}.obj",
    )
    d1.download_button(
        "Trees JSON", trees_to_json_bytes(tile.trees), f"tile_{tile.x}_{tile.z}_trees.json"
    )
