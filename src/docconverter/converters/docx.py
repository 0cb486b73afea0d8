"""DOCX to Markdown converter using mammoth and markdownify."""

import logging
from pathlib import Path

from docconverter.converters.base import BaseConverter, ConversionResult
from docconverter.converters.html import HTMLConverter

log = logging.getLogger(__name__)


class DOCXConverter(BaseConverter):
    """Convert DOCX files to Markdown using mammoth."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".docx", ".doc"]

    def convert(self, file_path: Path) -> ConversionResult:
        """Convert a DOCX file to Markdown.

        Embedded images are written to the shared assets directory when
        image processing is enabled, otherwise they are dropped.

        Args:
            file_path: Path to the DOCX file.

        Returns:
            ConversionResult with the conversion outcome.
        """
        try:
            import mammoth
        except ImportError as e:
            return self._create_error_result(
                file_path,
                f"Required package not installed: {e}. Run: pip install mammoth",
            )

        try:
            image_counter = [0]  # Use list to allow mutation in closure
            assets_dir = self.options.output_dir.parent / "assets"

            def handle_image(image):
                if not self.options.process_images:
                    return {}

                image_counter[0] += 1
                extension = image.content_type.split("/")[-1]
                if extension == "jpeg":
                    extension = "jpg"
                image_path = assets_dir / f"{file_path.stem}-image-{image_counter[0]}.{extension}"

                if not self.options.dry_run:
                    assets_dir.mkdir(parents=True, exist_ok=True)
                    with image.open() as img_stream:
                        image_path.write_bytes(img_stream.read())

                return {"src": f"../assets/{image_path.name}"}

            with open(file_path, "rb") as docx_file:
                result = mammoth.convert_to_html(
                    docx_file,
                    convert_image=mammoth.images.img_element(handle_image),
                )

            for message in result.messages:
                log.warning("%s: %s", file_path.name, message)

        except Exception as e:
            return self._create_error_result(file_path, str(e))

        return HTMLConverter(self.options).html_to_markdown(result.value, file_path)
