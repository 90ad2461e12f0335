"""Command-line entry points for chunkhash."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, NoReturn, Optional

import typer

from chunkhash.boundaries import at_offsets, every
from chunkhash.config import ChunkhashConfig, ConfigError, dump_example_config, load_config
from chunkhash.digests import DigestRecorder, DigestVerifier
from chunkhash.errors import ChunkhashError
from chunkhash.hashing import hash_factory
from chunkhash.io.fetcher import is_url, stream_url
from chunkhash.io.tee import NullSink, copy_stream
from chunkhash.util.logging import configure_logging
from chunkhash.util.manifest import read_manifest, write_manifest
from chunkhash.writer import HashingWriter

app = typer.Typer(add_completion=False, help="Chunked pass-through hashing CLI")


def _settings(
    config_path: Optional[Path], *, algorithm: Optional[str] = None, every_bytes: Optional[int] = None
) -> ChunkhashConfig:
    overrides: dict[str, object] = {}
    if algorithm:
        overrides["hashing.algorithm"] = algorithm
    if every_bytes:
        overrides["boundaries.every"] = every_bytes
    try:
        return load_config(config_path, overrides=overrides)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)


def _logger(cfg: ChunkhashConfig) -> logging.Logger:
    return configure_logging(log_path=cfg.runtime.log_path, level=cfg.runtime.log_level)


@contextmanager
def _open_source(source: str) -> Iterator[BinaryIO]:
    if source == "-":
        yield sys.stdin.buffer
        return
    path = Path(source)
    if not path.is_file():
        typer.echo(f"Source {source} does not exist.", err=True)
        raise typer.Exit(code=2)
    with path.open("rb") as handle:
        yield handle


def _pump(source: str, writer: HashingWriter, cfg: ChunkhashConfig) -> int:
    if is_url(source):
        return stream_url(
            source,
            writer,
            timeout_seconds=cfg.io.timeout_seconds,
            chunk_size=cfg.io.read_size,
        )
    with _open_source(source) as handle:
        return copy_stream(handle, writer, read_size=cfg.io.read_size)


def _fail(exc: Exception, logger: logging.Logger) -> NoReturn:
    logger.error("%s", exc)
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("sum")
def sum_command(
    source: str = typer.Argument(..., help="File path, '-' for stdin, or http(s) URL"),
    every_bytes: Optional[int] = typer.Option(None, "--every", "-e", min=1, help="Chunk size in bytes"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a", help="Hash algorithm"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write a JSON digest manifest here"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
) -> None:
    """Print (or save) one digest per chunk of SOURCE."""

    cfg = _settings(config, algorithm=algorithm, every_bytes=every_bytes)
    logger = _logger(cfg)
    recorder = DigestRecorder()
    writer = HashingWriter(
        NullSink(),
        hash_factory(cfg.hashing.algorithm),
        every(cfg.boundaries.every),
        recorder,
    )
    try:
        total = _pump(source, writer, cfg)
        writer.close()
    except (ChunkhashError, OSError) as exc:
        _fail(exc, logger)

    logger.info("Hashed %s bytes into %s chunks", total, len(recorder))
    if output:
        write_manifest(recorder.events, output, algorithm=cfg.hashing.algorithm, boundary=cfg.boundaries.every)
        logger.info("Wrote manifest %s", output)
        return
    for event in recorder.events:
        typer.echo(f"{event.offset} {event.hexdigest}")


@app.command()
def verify(
    source: str = typer.Argument(..., help="File path, '-' for stdin, or http(s) URL"),
    manifest: Path = typer.Option(..., "--manifest", "-m", help="Digest manifest to check against"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
) -> None:
    """Check SOURCE against a digest manifest, stopping at the first bad chunk."""

    cfg = _settings(config)
    logger = _logger(cfg)
    try:
        expected = read_manifest(manifest)
        new_hash = hash_factory(expected.algorithm)
    except (ChunkhashError, OSError) as exc:
        _fail(exc, logger)

    verifier = DigestVerifier(expected.expected())
    writer = HashingWriter(NullSink(), new_hash, at_offsets(verifier.missing()), verifier)
    try:
        _pump(source, writer, cfg)
        writer.close()
    except (ChunkhashError, OSError) as exc:
        _fail(exc, logger)

    missing = verifier.missing()
    if missing:
        typer.echo(f"error: source ended before offset {missing[0]}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"OK {verifier.verified} chunks")


@app.command()
def split(
    source: str = typer.Argument(..., help="File path, '-' for stdin, or http(s) URL"),
    dest: Path = typer.Argument(..., help="Destination file"),
    manifest: Path = typer.Option(..., "--manifest", "-m", help="Where to write the digest manifest"),
    every_bytes: Optional[int] = typer.Option(None, "--every", "-e", min=1, help="Chunk size in bytes"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a", help="Hash algorithm"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
) -> None:
    """Copy SOURCE to DEST while recording per-chunk digests."""

    cfg = _settings(config, algorithm=algorithm, every_bytes=every_bytes)
    logger = _logger(cfg)
    recorder = DigestRecorder()
    dest.parent.mkdir(parents=True, exist_ok=True)
    with dest.open("wb") as sink:
        writer = HashingWriter(sink, hash_factory(cfg.hashing.algorithm), every(cfg.boundaries.every), recorder)
        try:
            total = _pump(source, writer, cfg)
            writer.close()
        except (ChunkhashError, OSError) as exc:
            _fail(exc, logger)

    write_manifest(recorder.events, manifest, algorithm=cfg.hashing.algorithm, boundary=cfg.boundaries.every)
    logger.info("Copied %s bytes to %s (%s chunks)", total, dest, len(recorder))


@app.command("init-config")
def init_config(dest: Path = typer.Argument(..., help="Destination YAML or JSON file")) -> None:
    """Write the default configuration to DEST."""

    try:
        dump_example_config(dest)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
