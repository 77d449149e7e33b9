"""pngmeta - PNG chunk codec and XMP text metadata tools."""

__version__ = "0.3.0"
