# spectroscope/cli.py - Command-line interface
"""
Command-line interface for spectroscope.
"""

import click
import sys
import yaml
from pathlib import Path

from spectroscope.exceptions import SpectroscopeError
from spectroscope.utils.config import Config
from spectroscope.utils.logger import get_logger, setup_logging


logger = get_logger(__name__)


@click.group()
@click.option('--log-level', default='INFO', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']))
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.option('--config', 'config_file', type=click.Path(), help='Configuration file')
@click.pass_context
def cli(ctx, log_level, log_file, config_file):
    """
    spectroscope

    Compares two snapshots of a distributed system's request-flow graphs and
    reports which request categories and which edges changed.
    """
    ctx.ensure_object(dict)

    setup_logging(level=log_level, log_file=log_file)

    ctx.obj['log_level'] = log_level
    try:
        ctx.obj['config'] = Config(config_file)
    except (yaml.YAMLError, ValueError) as e:
        _fail(e)


def _fail(error: Exception):
    if isinstance(error, OSError) and error.filename:
        logger.error(f"{error.strerror or error}: {error.filename}")
    else:
        logger.error(f"{error}")
    sys.exit(1)


@cli.command('compare-categories')
@click.argument('s0_counts', type=click.Path())
@click.argument('s1_counts', type=click.Path())
@click.argument('output_file', type=click.Path())
@click.argument('stats_file', type=click.Path())
@click.option('--json', 'json_file', type=click.Path(), help='Also export results as JSON')
@click.option('--quiet', is_flag=True, help='Do not print a summary')
@click.pass_context
def compare_categories(ctx, s0_counts, s1_counts, output_file, stats_file, json_file, quiet):
    """
    Compare per-category request counts of two snapshots.

    Example:
        spectroscope compare-categories s0_counts.dat s1_counts.dat results.dat stats.txt
    """
    from spectroscope.stats.category_comparator import CategoryComparator
    from spectroscope.stats.report_generator import ReportGenerator
    from spectroscope.exporters.text_exporter import TextExporter
    from spectroscope.exporters.stdout import StdoutExporter

    cfg = ctx.obj['config']
    comparator = CategoryComparator(cfg.section('categories'))

    try:
        comparison = comparator.compare_files(s0_counts, s1_counts)

        exporter = TextExporter()
        exporter.write_category_result(comparison, output_file)
        exporter.write_report(ReportGenerator().generate_category_report(comparison), stats_file)

        if json_file:
            json_exporter, name = _json_exporter(json_file)
            json_exporter.export_category_comparison(comparison, name)

    except (SpectroscopeError, OSError) as e:
        _fail(e)

    if not quiet:
        StdoutExporter().print_category_comparison(comparison)


@cli.command('compare-edges')
@click.argument('s0_latencies', type=click.Path())
@click.argument('s1_latencies', type=click.Path())
@click.argument('output_file', type=click.Path())
@click.argument('stats_file', type=click.Path(), required=False)
@click.option('--workers', type=int, help='Number of worker threads')
@click.option('--json', 'json_file', type=click.Path(), help='Also export results as JSON')
@click.option('--quiet', is_flag=True, help='Do not print a summary')
@click.pass_context
def compare_edges(ctx, s0_latencies, s1_latencies, output_file, stats_file, workers, json_file, quiet):
    """
    Compare per-edge latency distributions of two snapshots.

    Example:
        spectroscope compare-edges s0_latencies.dat s1_latencies.dat edges.dat
        spectroscope compare-edges s0.dat s1.dat edges.dat edge_stats.txt --workers 4
    """
    from spectroscope.stats.edge_comparator import EdgeLatencyComparator
    from spectroscope.stats.report_generator import ReportGenerator
    from spectroscope.exporters.text_exporter import TextExporter
    from spectroscope.exporters.stdout import StdoutExporter

    cfg = ctx.obj['config']
    if workers:
        cfg.set('edges.workers', workers)
    comparator = EdgeLatencyComparator(cfg.section('edges'))

    try:
        results = comparator.compare_files(s0_latencies, s1_latencies)

        exporter = TextExporter()
        exporter.write_edge_results(results, output_file)
        if stats_file:
            exporter.write_report(ReportGenerator().generate_edge_report(results), stats_file)

        if json_file:
            json_exporter, name = _json_exporter(json_file)
            json_exporter.export_edge_results(results, name)

    except (SpectroscopeError, OSError) as e:
        _fail(e)

    if not quiet:
        StdoutExporter().print_edge_results(results)


@cli.command()
@click.argument('graphs_file', type=click.Path())
@click.option('--output', type=click.Path(), help='Output file (default: stdout)')
def canonicalize(graphs_file, output):
    """
    Rewrite request-flow graphs in canonical depth-first order.

    Example:
        spectroscope canonicalize s0_graphs.dot --output s0_canonical.dot
    """
    from spectroscope.graph.dot_format import build_from_text, serialize, split_graphs

    try:
        with open(graphs_file, 'r') as f:
            text = f.read()

        graphs = [build_from_text(block) for block in split_graphs(text)]
        logger.info(f"Read {len(graphs)} graphs from {graphs_file}")

        rendered = "".join(serialize(graph) for graph in graphs)

        if output:
            with open(output, 'w') as f:
                f.write(rendered)
            logger.info(f"Wrote {len(graphs)} graphs to {output}")
        else:
            click.echo(rendered, nl=False)

    except (SpectroscopeError, OSError) as e:
        _fail(e)


def _json_exporter(json_file: str):
    from spectroscope.exporters.json_exporter import JSONExporter

    path = Path(json_file)
    return JSONExporter(str(path.parent)), path.name


if __name__ == '__main__':
    cli(obj={})

