"""Shared type definitions for zs."""

from typing import BinaryIO, Literal

# Resolved variables for one source file (lower-case names)
type Vars = dict[str, str]

# Mode of operation
type ZsMode = Literal["build", "watch"]

# Render strategy chosen from a file extension
type RenderKind = Literal["markdown", "template", "copy", "fragment"]

# Destination for streamed (non-mirrored) output
type OutputSink = BinaryIO
