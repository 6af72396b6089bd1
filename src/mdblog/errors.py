"""Exception hierarchy for the rendering pipeline."""


class MdBlogError(Exception):
    """Base class for all mdblog errors."""


class RenderError(MdBlogError):
    """Raised when a page cannot be rendered."""


class TemplateResolutionError(RenderError):
    """Raised when a template reference cannot be resolved to a render function."""

    def __init__(self, reference: str, message: str | None = None) -> None:
        self.reference = reference
        self.message = message or f"Template not found: {reference}"
        super().__init__(self.message)


class TemplateRenderError(RenderError):
    """Raised when a resolved template fails while rendering."""

    def __init__(self, reference: str, message: str) -> None:
        self.reference = reference
        super().__init__(f"Template rendering failed: {reference} - {message}")


class ShellError(MdBlogError):
    """Raised when the page shell is missing or has no insertion point."""


class EnvironmentClosedError(MdBlogError):
    """Raised when a closed rendering environment is asked to resolve a template."""


class GenerationError(MdBlogError):
    """Raised when static site generation aborts."""

    def __init__(self, message: str, step: str | None = None) -> None:
        self.step = step
        full_message = f"Static site generation failed: {message}"
        if step is not None:
            full_message += f" (step: {step})"
        super().__init__(full_message)
