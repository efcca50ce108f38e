#!/usr/bin/env python3
"""
Command-line tool for generating, ranking, validating and exporting herd snapshots
"""

import argparse
import json
import sys
from dataclasses import replace

from easyranch.config_manager.manager import ConfigManager
from easyranch.custom_logging.structured_logger import setup_logging
from easyranch.data_collection.simulator import SnapshotGenerator
from easyranch.data_validation.validator import validate_snapshot
from easyranch.export.exporter import DataExporter
from easyranch.scoring.attention import rank_attention
from easyranch.utils.config import Config
from easyranch.utils.helpers import format_percentage_change, format_temperature


def non_negative_int(value):
    """argparse type for counts that may be zero but not negative"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def build_snapshot(args):
    """Generate a snapshot from config, overridden by command-line options"""
    manager = ConfigManager(args.config_dir)
    manager.load_all()
    config = Config.from_manager(manager)

    logger = setup_logging(
        level=args.log_level or config.log_level,
        json_format=config.logging.get('json_format', False),
        file_enabled=config.logging.get('file_enabled', False),
        log_dir=config.logging.get('log_dir', 'logs'),
        separate_error_log=config.logging.get('separate_error_log', False),
    )

    overrides = {}
    if args.cows is not None:
        overrides['population_size'] = args.cows
    if args.days is not None:
        overrides['day_window'] = args.days
    if args.seed is not None:
        overrides['seed'] = args.seed
    settings = replace(config.generator, **overrides)

    with logger.timer("generate_snapshot"):
        snapshot = SnapshotGenerator(settings).generate()
    return snapshot, config


def print_summary(snapshot):
    kpis = snapshot.kpi_metrics
    changes = kpis.changes

    print(f"\nSnapshot generated at {snapshot.generated_at:%Y-%m-%d %H:%M:%S} (seed: {snapshot.seed})")
    print("-" * 60)
    print(f"Total cows:          {kpis.total_cows}")
    print(f"Healthy cows:        {kpis.healthy_cows}")
    print(f"Pregnant cows:       {kpis.pregnant_cows}")
    print(f"Active alerts:       {kpis.alerts_count}")
    print(f"Average activity:    {kpis.average_activity}")
    print(f"Pregnancy rate:      {kpis.pregnancy_rate}% ({format_percentage_change(changes['pregnancyRate'])})")
    print(f"Health rate:         {kpis.health_rate}% ({format_percentage_change(changes['healthRate'])})")
    print(f"Average temperature: {format_temperature(kpis.average_temperature)}")
    print(f"Activities logged:   {len(snapshot.activities)}")


def cmd_generate(args):
    snapshot, _ = build_snapshot(args)
    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print_summary(snapshot)
    return 0


def cmd_attention(args):
    snapshot, config = build_snapshot(args)
    limit = args.limit if args.limit is not None else config.dashboard.attention_limit
    entries = rank_attention(snapshot.animals, limit, snapshot.generated_at)

    if not entries:
        print("No cows currently need attention.")
        return 0

    print(f"\n{'COW ID':<10}{'BREED':<12}{'STATUS':<12}{'TEMP':>8}{'ALERTS':>8}{'SCORE':>8}")
    print("-" * 58)
    for entry in entries:
        cow = entry.cow
        print(f"{cow.id:<10}{cow.breed.value:<12}{cow.health_status.value:<12}"
              f"{format_temperature(cow.vitals.temperature):>8}{len(cow.alerts):>8}{entry.score:>8}")
    return 0


def cmd_validate(args):
    snapshot, _ = build_snapshot(args)
    report = validate_snapshot(snapshot)

    print(f"\nRules checked: {report.rules_checked}")
    print(f"Errors: {len(report.errors)}  Warnings: {len(report.warnings)}")
    for message in report.errors:
        print(f"  ERROR   {message}")
    for message in report.warnings:
        print(f"  WARNING {message}")

    return 0 if report.is_valid else 1


def cmd_export(args):
    snapshot, config = build_snapshot(args)
    output_dir = args.output_dir or config.export.get('output_dir', './outputs/exports')
    formats = args.format or config.export.get('formats')

    exporter = DataExporter(output_dir)
    results = exporter.export_snapshot(snapshot, formats)

    if not results:
        print("Nothing to export: the snapshot is empty.")
        return 0

    print(f"\nExported {len(results)} tables to {output_dir}:")
    for table, files in results.items():
        for fmt, filepath in files.items():
            print(f"  {table} [{fmt.upper()}]: {filepath}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='EasyRanch herd snapshot tool')
    parser.add_argument('--config-dir', default='config', help='Directory holding settings.yaml')
    parser.add_argument('--cows', type=non_negative_int, help='Population size')
    parser.add_argument('--days', type=non_negative_int, help='Day window for activities and trends')
    parser.add_argument('--seed', type=int, help='Seed for reproducible snapshots')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Override the configured log level')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    generate_parser = subparsers.add_parser('generate', help='Generate a snapshot and print a summary')
    generate_parser.add_argument('--json', action='store_true', help='Print the full snapshot as JSON')

    attention_parser = subparsers.add_parser('attention', help='List cows needing attention')
    attention_parser.add_argument('--limit', type=non_negative_int, help='Maximum number of cows')

    subparsers.add_parser('validate', help='Validate a generated snapshot')

    export_parser = subparsers.add_parser('export', help='Export snapshot tables')
    export_parser.add_argument('--format', action='append', choices=['csv', 'json'],
                               help='Output format (repeatable)')
    export_parser.add_argument('--output-dir', help='Directory for exported files')

    args = parser.parse_args(argv)

    commands = {
        'generate': cmd_generate,
        'attention': cmd_attention,
        'validate': cmd_validate,
        'export': cmd_export,
    }

    if args.command not in commands:
        parser.print_help()
        return 1

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
