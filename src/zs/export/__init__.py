"""Export layer: rendering source files into the publish directory.

Dispatches each file by extension to markdown, template or raw-copy output.
"""

from zs.export.renderer import RenderDispatcher, create_template_env, render_kind

__all__ = ["RenderDispatcher", "create_template_env", "render_kind"]
