"""HTML file output writer."""

from pathlib import Path

import aiofiles


class HtmlFileOutput:
    """Write a linkified document to an HTML file."""

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)

    async def write(self, html: str) -> Path:
        """Write the document, creating parent directories as needed."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        if self.output_path.suffix not in (".html", ".htm"):
            self.output_path = self.output_path.with_suffix(".html")

        async with aiofiles.open(self.output_path, "w", encoding="utf-8") as f:
            await f.write(html)

        return self.output_path
