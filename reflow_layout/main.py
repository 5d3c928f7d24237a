"""Entry-point for the reflow layout pipeline."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from reflow_layout.layout.context import EngineContext
from reflow_layout.layout.layout_calculator import LayoutCalculator
from reflow_layout.model.elements import LayoutModel
from reflow_layout.model.settings import LayoutSettings
from reflow_layout.parser.tree_loader import TreeLoader
from reflow_layout.renderer.html_renderer import HtmlRenderer
from reflow_layout.utils.debug import DebugDumper
from reflow_layout.utils.logger import get_logger, set_verbosity

LOGGER = get_logger(__name__)


def load_settings(settings_file: Optional[str]) -> LayoutSettings:
    if settings_file is None:
        return LayoutSettings()
    settings_path = Path(settings_file).resolve()
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")
    return LayoutSettings.load(settings_path)


def build_layout(tree_path: Path, settings: LayoutSettings) -> LayoutModel:
    """Load a content tree and lay it out on pages described by ``settings``."""
    tree = TreeLoader.load(tree_path)
    context = EngineContext.from_settings(settings)
    root = settings.root_data(spine_dir=tree_path.parent)
    return LayoutCalculator(context).calculate(tree, root)


def render_outputs(model: LayoutModel, settings: LayoutSettings, output_dir: Path, *, html: bool = True) -> None:
    """Render the laid-out pages into the requested formats."""
    output_dir.mkdir(parents=True, exist_ok=True)
    if html:
        HtmlRenderer(output_dir / "layout.html").render(model, settings.page_rect())


def main(tree_file: str, output_dir: Optional[str] = None, settings_file: Optional[str] = None) -> None:
    """Run the content tree -> layout -> renderer pipeline."""
    tree_path = Path(tree_file).resolve()
    if not tree_path.exists():
        raise FileNotFoundError(f"Content tree not found: {tree_path}")

    settings = load_settings(settings_file)
    LOGGER.info("Laying out %s", tree_path.name)
    model = build_layout(tree_path, settings)

    if output_dir is None:
        output_dir = tree_path.with_suffix("")

    output_path = Path(output_dir).resolve()
    LOGGER.info("Rendering outputs into %s", output_path)
    render_outputs(model, settings, output_path)

    DebugDumper(output_path / "debug").dump(model)


if __name__ == "__main__":  # pragma: no cover
    import argparse

    parser = argparse.ArgumentParser(description="Lay out a JSON content tree into pages and preview them as HTML")
    parser.add_argument("tree_file", help="Path to the JSON content tree")
    parser.add_argument("--output", help="Directory to write generated artifacts")
    parser.add_argument("--settings", help="JSON file overriding the layout settings")
    parser.add_argument("--verbose", action="store_true", help="Log line breaking and pagination details")

    args = parser.parse_args()
    set_verbosity(args.verbose)
    main(args.tree_file, args.output, args.settings)
