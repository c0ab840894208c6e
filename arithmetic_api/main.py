"""
Command line entrypoint used by CI and Docker.

Two commands:
- ``serve`` starts the HTTP API and blocks until interrupted
- ``run <file>`` starts the server in a child process, sends every JSON
  expression of the file through the client and writes the results next to
  the input file, then stops the server

The ``run`` command validates end to end:
- HTTP communication
- Server process lifecycle
- Correctness of the evaluator on real input
"""

import argparse
from multiprocessing import Process
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, DirectoryPath, Field, FilePath, IPvAnyAddress, ValidationError

from arithmetic_api.client.client import ArithmeticClient
from arithmetic_api.common.logger import logger
from arithmetic_api.common.validator import DEFAULT_MAX_DEPTH
from arithmetic_api.server.config import ServerConfig
from arithmetic_api.server.server import ArithmeticServer


class ServeArgs(BaseModel):
    """
    Pydantic model used to validate the ``serve`` arguments.

    Every attribute is optional: unset ones keep the value from the
    environment (see ServerConfig.from_env) or the built-in default.

    Attributes
    ----------
    host : IPvAnyAddress, optional
        Interface to bind.
    port : int, optional
        TCP port to listen on.
    static_dir : DirectoryPath, optional
        Directory served at '/'.
    max_depth : int, optional
        Maximum expression nesting.
    """

    host: Optional[IPvAnyAddress] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    static_dir: Optional[DirectoryPath] = None
    max_depth: Optional[int] = Field(default=None, ge=1)

    def to_config(self, base: ServerConfig) -> ServerConfig:
        """
        Overlay the arguments given on the command line onto a base configuration.

        :param ServerConfig base: Configuration to start from

        :return: Validated configuration
        :rtype: ServerConfig
        """
        return ServerConfig(**{**base.model_dump(), **self.model_dump(exclude_none=True)})


class RunArgs(BaseModel):
    """
    Pydantic model used to validate the ``run`` arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing JSON expressions.
    port : int
        TCP port of the temporary server.
    """

    file_path: FilePath
    port: int = Field(default=3000, ge=1, le=65535)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its ``serve`` and ``run`` sub-commands."""
    parser = argparse.ArgumentParser(description="Arithmetic HTTP API")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Interface to bind (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="TCP port to listen on (default: $PORT or 3000)")
    serve.add_argument("--static-dir", default=None, help="Directory served at '/'")
    serve.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help=f"Maximum expression nesting (default: {DEFAULT_MAX_DEPTH})",
    )

    run = commands.add_parser("run", help="Evaluate a file of JSON expressions end to end")
    run.add_argument("file_path", help="Path to the file containing JSON expressions")
    run.add_argument("--port", type=int, default=3000, help="TCP port of the temporary server")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> BaseModel:
    """
    Parse and validate command-line arguments.

    :param list argv: Arguments, sys.argv[1:] by default

    :return: Validated ServeArgs or RunArgs
    :rtype: BaseModel
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            return ServeArgs(
                host=args.host,
                port=args.port,
                static_dir=args.static_dir,
                max_depth=args.max_depth,
            )
        return RunArgs(file_path=args.file_path, port=args.port)
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/expressions.tar.xz
    output: resources/expressions_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def run_server(config: ServerConfig) -> None:
    """
    Start the arithmetic server.

    The server runs in its own process and listens
    for incoming HTTP requests.
    """
    ArithmeticServer(config=config).start()


def run_file(args: RunArgs) -> Path:
    """
    Evaluate a file of expressions against a temporary server process.

    :param RunArgs args: Validated arguments

    :return: Path of the results file
    :rtype: Path
    :raises RuntimeError: If the server does not answer
    """
    input_path: Path = Path(args.file_path)
    output_path: Path = build_output_path(input_path)

    server_process = Process(target=run_server, args=(ServerConfig(port=args.port),))
    server_process.start()

    try:
        client = ArithmeticClient(port=args.port)
        if not client.wait_until_ready():
            raise RuntimeError(f"Server did not start on port {args.port}")
        client.send_file(input_path, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()

    return output_path


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function executed by the ``arithmetic-api`` script, CI or Docker.
    """
    args = parse_args(argv)

    if isinstance(args, ServeArgs):
        run_server(args.to_config(ServerConfig.from_env()))
    else:
        output_path = run_file(args)
        logger.info(f"✅ Results written to {output_path}")


if __name__ == "__main__":
    main()
