"""Writes a build's schema and resolver templates to disk."""

from pathlib import Path
from typing import List, Union
import logging

from .core import TransformResult

logger = logging.getLogger(__name__)

SCHEMA_FILENAME = "schema.graphql"
RESOLVERS_DIRNAME = "resolvers"


class FileEmitter:
    """Lays out generated artifacts the way deployment tooling expects them.

    ``schema.graphql`` at the root, and one request and one response template
    per field under ``resolvers/`` named ``<Type>.<field>.req.vtl`` and
    ``<Type>.<field>.res.vtl``.
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def emit(self, result: TransformResult) -> List[Path]:
        """Write every artifact of ``result`` and return the written paths."""
        resolver_dir = self.output_dir / RESOLVERS_DIRNAME
        resolver_dir.mkdir(parents=True, exist_ok=True)

        written = []
        schema_path = self.output_dir / SCHEMA_FILENAME
        schema_path.write_text(result.schema_sdl() + "\n", encoding="utf-8")
        written.append(schema_path)

        for table_name, resolvers in result.resolvers().items():
            for resolver in resolvers.values():
                stem = f"{resolver.type_name}.{resolver.field_name}"
                request_path = resolver_dir / f"{stem}.req.vtl"
                response_path = resolver_dir / f"{stem}.res.vtl"
                request_path.write_text(resolver.render_request() + "\n", encoding="utf-8")
                response_path.write_text(resolver.render_response() + "\n", encoding="utf-8")
                written.extend([request_path, response_path])
            logger.debug(f"Wrote {len(resolvers)} resolvers for table '{table_name}'")

        logger.info(f"Wrote {len(written)} files to {self.output_dir}")
        return written
