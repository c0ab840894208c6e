"""HTTP client for the arithmetic API."""
import json
from pathlib import Path
import tarfile
import tempfile
import time
from typing import Any, Dict, List, Optional, Tuple
import zipfile

import httpx
import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from arithmetic_api.common.logger import logger

# Files holding one JSON expression per line
EXPRESSION_SUFFIXES: Tuple[str, ...] = (".txt", ".jsonl")


class ArithmeticClient(BaseModel):
    """
    HTTP client responsible for sending arithmetic requests to the server.

    The client:
    - calls the direct two-operand endpoints
    - posts expression trees to /api/calculate
    - reads JSON expressions (one per line) from a text file or an archive,
      sends them one by one and writes the results into an output file
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    # Allow arbitrary types like httpx.BaseTransport
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=3000, ge=1, le=65535, description="Server TCP port")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    transport: Optional[httpx.BaseTransport] = Field(
        default=None, description="Custom transport, e.g. httpx.MockTransport in tests"
    )

    @property
    def base_url(self) -> str:
        """Root URL of the server, e.g. http://127.0.0.1:3000."""
        return f"http://{self.host}:{self.port}"

    def _http(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    def compute(self, action: str, v1: float, v2: float) -> Dict[str, Any]:
        """
        Call one of the direct endpoints.

        :param str action: Operator name (add, subtract, multiply, divide, power, root)
        :param float v1: Left operand
        :param float v2: Right operand

        :return: Decoded JSON body, either {action, v1, v2, result} or {error}
        :rtype: Dict[str, Any]
        """
        with self._http() as http:
            response = http.get(f"/api/{action}", params={"v1": v1, "v2": v2})
        return response.json()

    def calculate(self, expression: Any) -> Dict[str, Any]:
        """
        Post an expression tree to /api/calculate.

        :param Any expression: Number or {"op": ..., "args": [...]} structure

        :return: Decoded JSON body, either {action, result} or {error}
        :rtype: Dict[str, Any]
        """
        with self._http() as http:
            response = http.post("/api/calculate", json=expression)
        return response.json()

    def wait_until_ready(self, retries: int = 20, delay: float = 0.25) -> bool:
        """
        Poll the discovery endpoint until the server answers.

        :param int retries: Number of attempts
        :param float delay: Seconds between attempts

        :return: True once the server answered, False if it never did
        :rtype: bool
        """
        with self._http() as http:
            for _ in range(retries):
                try:
                    http.get("/api/")
                    return True
                except httpx.TransportError:
                    time.sleep(delay)
        return False

    def send_file(self, input_file: FilePath, output_file: Path) -> int:
        """
        Send every expression of an input file to the server and write the results.

        Each non-empty line must hold one JSON expression. The output file gets
        one line per expression: ``<expression> = <result>`` on success or
        ``<expression> -> ERROR: <message>`` on failure.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: Number of expressions processed
        :rtype: int
        :raises ValueError: If the archive format is unsupported or contains no expression file
        """
        # Load expressions from file or archive
        if input_file.suffix in EXPRESSION_SUFFIXES:
            content = input_file.read_text()
        else:
            content = self._extract_archive(input_file)

        lines: List[str] = [line.strip() for line in content.splitlines() if line.strip()]

        with self._http() as http, output_file.open("w", encoding="utf-8") as f_out:
            for line_number, line in enumerate(lines, start=1):
                try:
                    json.loads(line)
                except (ValueError, RecursionError):
                    logger.error(f"📄❌ Line {line_number} is not valid JSON: {line!r}")
                    f_out.write(f"{line} -> ERROR: Invalid JSON expression\n")
                    continue

                # Raw line as body: httpx refuses to encode NaN or infinite floats such as 1e400
                payload = http.post(
                    "/api/calculate",
                    content=line.encode(),
                    headers={"Content-Type": "application/json"},
                ).json()
                if "result" in payload:
                    f_out.write(f"{line} = {payload['result']}\n")
                else:
                    f_out.write(f"{line} -> ERROR: {payload['error']}\n")
                # Flushing keeps partial results if the run is interrupted
                f_out.flush()

        logger.info(f"✉️ {len(lines)} expressions sent, results written to {output_file}")
        return len(lines)

    def _extract_archive(self, archive_path: FilePath) -> str:
        """
        Extract the first expression file found in a supported archive and return its content.

        Supported formats:
        - .zip
        - .tar.xz
        - .7z

        :param FilePath archive_path: Path to the archive file

        :return: Content of the extracted expression file
        :rtype: str
        :raises ValueError: If no expression file is found or format is unsupported
        """

        def is_expression_file(name: str) -> bool:
            return name.endswith(EXPRESSION_SUFFIXES)

        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)
            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    members = [name for name in zf.namelist() if is_expression_file(name)]
                    if not members:
                        raise ValueError("📄❌ No expression file found in zip archive")
                    zf.extract(members[0], path=tmpdir_path)
                    return (tmpdir_path / members[0]).read_text()

            elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    members = [m for m in tf.getmembers() if m.isfile() and is_expression_file(m.name)]
                    if not members:
                        raise ValueError("📄❌ No expression file found in tar.xz archive")
                    tf.extract(members[0], path=tmpdir_path, filter="data")
                    return (tmpdir_path / members[0].name).read_text()

            elif archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    members = [name for name in archive.getnames() if is_expression_file(name)]
                    if not members:
                        raise ValueError("📄❌ No expression file found in 7z archive")
                    archive.extract(path=tmpdir_path, targets=[members[0]])
                    return (tmpdir_path / members[0]).read_text()

            else:
                raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")
