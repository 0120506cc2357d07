"""Command-line interface for the library surface analyser."""

import sys
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

import click
from rich.console import Console

from . import __version__
from .config import Config, ConfigError
from .core.analysis import LibraryAnalyser, UnknownContractTypeError
from .core.baseline import BaselineIndex
from .core.loader import collect_candidate_types
from .core.providers import ArchiveTypeProvider
from .core.reporting import create_reporter, format_source_stats, format_usage_stats
from .performance.parallel import ParallelExecutor
from .utils.logging_setup import get_logger, log_operation, setup_logging

EXIT_USAGE = 2  # click.UsageError default
EXIT_IO_ERROR = 3

logger = get_logger(__name__)

# Progress and statistics go to stderr; the report owns stdout
console = Console(stderr=True, highlight=False, markup=False)


class InputOutputError(click.ClickException):
    """Fatal failure reading an input or opening the report destination."""

    exit_code = EXIT_IO_ERROR

    def __init__(self, message: str):
        super().__init__(f"Error with input or output: {message}")


def _split_names(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


@contextmanager
def _open_output(destination: str) -> Iterator[TextIO]:
    if destination == "-":
        yield sys.stdout
        return
    try:
        stream = open(destination, "w", encoding="utf-8")
    except OSError as e:
        raise InputOutputError(f"{destination}: {e.strerror or e}") from e
    with stream:
        yield stream


def _load_config(config_path: Optional[Path]) -> Config:
    try:
        if config_path is not None:
            return Config.from_file(config_path)
        return Config.find_and_load(Path.cwd())
    except ConfigError as e:
        raise click.UsageError(f"Invalid configuration: {e}")
    except OSError as e:
        raise InputOutputError(str(e)) from e


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Find the methods of a library that can use lambda expressions and mark "
         "those added since the baseline version.\n\n"
         "BASELINE_FILE lists the baseline methods (type[,method,param...] per line); "
         "ARCHIVE is the jar of compiled classes to analyse.",
)
@click.argument("baseline_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("archive", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output", metavar="PATH",
              help="Output file ('-' for stdout).")
@click.option("-t", "--type", "type_name", metavar="TYPE",
              help="Type to analyse (rather than the full archive).")
@click.option("-f", "--functional", "functional", metavar="TYPES",
              help="Comma-separated functional interfaces to search for.")
@click.option("-p", "--print-interfaces", is_flag=True,
              help="Record details of functional interfaces found.")
@click.option("-s", "--stream-sources", is_flag=True,
              help="Record all methods that return a Stream.")
@click.option("-n", "--mark-new", is_flag=True,
              help="Mark new types and methods.")
@click.option("-i", "--ignore-stream-package", is_flag=True,
              help="Ignore the excluded namespace (java.util.stream) in listings.")
@click.option("-c", "--config", "config_path",
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Path to configuration file.")
@click.option("-j", "--workers", type=click.IntRange(min=1),
              help="Worker threads for the analysis passes.")
@click.option("--format", "report_format", type=click.Choice(["text", "json"]),
              help="Report format.")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
@click.version_option(__version__, prog_name="lambdascan")
def main(
    baseline_file: Path,
    archive: Path,
    output: Optional[str],
    type_name: Optional[str],
    functional: Optional[str],
    print_interfaces: bool,
    stream_sources: bool,
    mark_new: bool,
    ignore_stream_package: bool,
    config_path: Optional[Path],
    workers: Optional[int],
    report_format: Optional[str],
    verbose: bool,
):
    contract_names = _split_names(functional)
    if type_name and contract_names:
        raise click.UsageError("Options -t/--type and -f/--functional are mutually exclusive")

    config = _load_config(config_path)
    if output:
        config.set("report.output", output)
    if workers:
        config.set("scan.workers", workers)
    if report_format:
        config.set("report.format", report_format)
    if verbose:
        config.set("logging.level", "DEBUG")
    try:
        config.validate()
    except ConfigError as e:
        raise click.UsageError(f"Invalid configuration: {e}")

    setup_logging(
        level=config.get("logging.level", "WARNING"),
        log_file=config.get("logging.file"),
    )
    log_operation(logger, "cli_main", baseline=str(baseline_file), archive=str(archive))

    console.print("Reading in baseline method list...")
    try:
        baseline = BaselineIndex.from_file(
            baseline_file,
            detect_new_types=bool(config.get("novelty.detect_new_types", False)),
        )
    except OSError as e:
        raise InputOutputError(f"{baseline_file}: {e.strerror or e}") from e
    console.print(f"Baseline has {len(baseline)} classes")

    try:
        provider = ArchiveTypeProvider(archive)
    except (OSError, zipfile.BadZipFile) as e:
        raise InputOutputError(f"{archive}: {e}") from e

    with provider, ParallelExecutor(max_workers=config.get("scan.workers")) as executor:
        console.print("Extracting candidate class list...")
        candidates = collect_candidate_types(
            provider.entry_names(),
            prefixes=config.get("candidates.namespace_prefixes"),
            executor=executor,
        )
        console.print(f"Candidate archive has {len(candidates)} classes")

        analyser = LibraryAnalyser(
            provider,
            baseline,
            candidates,
            source_type=config.get("scan.source_type"),
            public_only=bool(config.get("scan.public_only", False)),
            executor=executor,
        )
        console.print(f"Found {len(analyser.contract_types)} functional interfaces")

        try:
            analyser.validate_contract_types(contract_names)
        except UnknownContractTypeError as e:
            raise click.BadParameter(str(e), param_hint="'-f' / '--functional'")

        _run_analysis(
            analyser,
            config,
            type_name=type_name,
            contract_names=contract_names,
            print_interfaces=print_interfaces,
            stream_sources=stream_sources,
            mark_new=mark_new,
            ignore_stream_package=ignore_stream_package,
        )


def _run_analysis(
    analyser: LibraryAnalyser,
    config: Config,
    type_name: Optional[str],
    contract_names: List[str],
    print_interfaces: bool,
    stream_sources: bool,
    mark_new: bool,
    ignore_stream_package: bool,
) -> None:
    excluded = config.get("scan.excluded_namespace") if ignore_stream_package else None

    with _open_output(config.get("report.output", "-")) as stream:
        reporter = create_reporter(
            config.get("report.format", "text"),
            stream,
            analyser.baseline,
            mark_new=mark_new,
            marker=config.get("novelty.marker", "NEW"),
            excluded_namespace=excluded,
        )
        with reporter:
            if print_interfaces:
                reporter.write_contract_types(analyser.contract_types)

            if type_name:
                results = [analyser.analyse_type(type_name)]
            elif contract_names:
                results = []
                for name in contract_names:
                    console.print(f"Searching for methods that can use {name}")
                    results.append(analyser.find_use_of_contract_type(name))
            else:
                results = [analyser.analyse_all_types()]

            for result in results:
                stats = reporter.write_parameter_role(result)
                console.print(format_usage_stats(stats))

            if stream_sources:
                # Source-role methods come from the last pass
                stats = reporter.write_return_role(results[-1])
                console.print(format_source_stats(stats))

    unresolved = sum(len(result.unresolved) for result in results)
    if unresolved:
        logger.info(f"{unresolved} types could not be resolved")


if __name__ == "__main__":
    main()
