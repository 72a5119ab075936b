"""Static discovery of CSS class names for Razor and Blazor projects."""

__version__ = "0.4.0"
