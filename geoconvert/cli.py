"""
Command-line interface for geoconvert.

Usage:
    geoconvert [--config CONFIG] [--json] [-v] <command> [args]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Settings, load_settings
from .handler import SkillHandler

logger = logging.getLogger(__name__)

EXAMPLES = '''
Examples:
    # WGS84 (GPS) to Web Mercator
    geoconvert transform EPSG:4326 EPSG:3857 "116.404,39.915"

    # GPS to Gaode (GCJ02) and Baidu (BD09)
    geoconvert china WGS84 GCJ02 "116.404,39.915"
    geoconvert china WGS84 BD09 "116.404,39.915"

    # Several points at once
    geoconvert batch EPSG:4326 EPSG:3857 "116.404,39.915;121.473,31.230"

    # Geodetic <-> ECEF
    geoconvert blh-to-xyz 39.915 116.404 100
    geoconvert xyz-to-blh -2175332.1 4382498.5 4070937.1 --ellipsoid GRS80

    # Custom CRS, kept in the config file
    geoconvert --config geoconvert.yaml define LOCAL "+proj=utm +zone=50 +datum=WGS84 +units=m +no_defs" --save

    # Reference data
    geoconvert list
    geoconvert info EPSG:4326
    geoconvert ellipsoid Clarke1866
    geoconvert elevation 39.915 116.404
'''


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='geoconvert',
        description='Coordinate conversion: China offsets (WGS84/GCJ02/BD09), BLH <-> ECEF and CRS projections',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLES,
    )
    parser.add_argument('--config', '-c', type=str, default=None, help='Path to YAML configuration file')
    parser.add_argument('--json', action='store_true', help='Print results as JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')

    sub = parser.add_subparsers(dest='command', metavar='<command>')

    sub.add_parser('list', help='List all available coordinate reference systems')

    p = sub.add_parser('define', help='Define a custom CRS')
    p.add_argument('name')
    p.add_argument('definition', help='PROJ string, EPSG code or WKT')
    p.add_argument('--save', action='store_true', help='Store the definition in the --config file')

    for name, help_text in (
        ('transform', 'Transform coordinates'),
        ('china', 'Transform Chinese coordinates (WGS84/GCJ02/BD09)'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('from_crs', metavar='from')
        p.add_argument('to_crs', metavar='to')
        p.add_argument('coordinates', help='"x,y", "x y" or "[x,y]"')

    p = sub.add_parser('batch', help='Transform multiple coordinates')
    p.add_argument('from_crs', metavar='from')
    p.add_argument('to_crs', metavar='to')
    p.add_argument('coordinates', help='"x1,y1;x2,y2;..."')
    p.add_argument('--china', action='store_true', help='Use China offset handling')

    p = sub.add_parser('info', help='Get CRS definition information')
    p.add_argument('crs')

    p = sub.add_parser('inverse', help='Check forward/inverse round trip')
    p.add_argument('from_crs', metavar='from')
    p.add_argument('to_crs', metavar='to')
    p.add_argument('--point', default='0,0', help='Test point (default: 0,0)')

    p = sub.add_parser('blh-to-xyz', help='Convert BLH to ECEF XYZ')
    p.add_argument('lat')
    p.add_argument('lon')
    p.add_argument('height', nargs='?', default='0')
    p.add_argument('--ellipsoid', '-e', default=None)

    p = sub.add_parser('xyz-to-blh', help='Convert ECEF XYZ to BLH')
    p.add_argument('X')
    p.add_argument('Y')
    p.add_argument('Z')
    p.add_argument('--ellipsoid', '-e', default=None)

    p = sub.add_parser('ellipsoid', help='Show ellipsoid information')
    p.add_argument('name', nargs='?', default=None)

    p = sub.add_parser('elevation', help='Look up terrain elevation')
    p.add_argument('lat')
    p.add_argument('lon')

    sub.add_parser('examples', help='Show usage examples')
    return parser


def _fmt(values: List[float], precision: int) -> str:
    return ', '.join(f'{v:.{precision}f}' for v in values)


def render(command: str, result: Dict[str, Any], precision: int) -> str:
    """Human readable rendering of a handler result."""
    if not result.get('success'):
        return f"Error: {result.get('error')}"

    lines: List[str] = []
    if command in ('transform', 'china'):
        lines.append(f"From:   {result.get('from')}")
        lines.append(f"To:     {result.get('to')}")
        lines.append(f"Input:  [{_fmt(result['input'], precision)}]")
        lines.append(f"Output: [{_fmt(result['output'], precision)}]")
    elif command == 'batch':
        lines.append(f"Batch transform completed ({result['count']} coordinates)")
        lines.append(f"From: {result.get('from')}  To: {result.get('to')}")
        for item in result['results']:
            if item['success']:
                lines.append(f"  [{item['index'] + 1}] [{_fmt(item['input'], precision)}] -> "
                             f"[{_fmt(item['output'], precision)}]")
            else:
                lines.append(f"  [{item['index'] + 1}] Error: {item['error']}")
    elif command == 'blh-to-xyz':
        lat, lon, h = result['input']
        lines.append(f"Ellipsoid: {result['ellipsoid']}")
        lines.append(f"Input:  lat={lat}°, lon={lon}°, height={h}m")
        lines.append(f"Output: X={result['X']:.4f}, Y={result['Y']:.4f}, Z={result['Z']:.4f} meters")
    elif command == 'xyz-to-blh':
        x, y, z = result['input']
        lines.append(f"Ellipsoid: {result['ellipsoid']}")
        lines.append(f"Input:  X={x}, Y={y}, Z={z} meters")
        lines.append(f"Output: lat={result['lat']:.{precision}f}°, lon={result['lon']:.{precision}f}°, "
                     f"height={result['height']:.4f}m")
    elif command == 'list':
        lines.append(f"Predefined CRS ({len(result['predefined'])}):")
        lines.extend(f"  {name}" for name in result['predefined'])
        if result['custom']:
            lines.append(f"Custom CRS ({len(result['custom'])}):")
            lines.extend(f"  {name}" for name in result['custom'])
    elif command == 'info':
        lines.append(f"CRS:        {result['crs']}")
        lines.append(f"Name:       {result['name']}")
        lines.append(f"Projection: {result['proj_name']}")
        lines.append(f"Units:      {result['units']}")
        lines.append(f"Definition: {result['definition']}")
    elif command == 'inverse':
        fwd, inv = result['forward'], result['inverse']
        lines.append(f"Forward: {fwd['from']} -> {fwd['to']}: {fwd['result']}")
        lines.append(f"Inverse: {inv['from']} -> {inv['to']}: {inv['result']}")
        accuracy = 'Accurate' if result['is_accurate'] else 'May have precision loss'
        lines.append(f"Round-trip accuracy: {accuracy} {result['round_trip_accuracy']}")
    elif command == 'ellipsoid':
        lines.append(f"Ellipsoid:           {result['name']}")
        lines.append(f"Description:         {result['description']}")
        lines.append(f"Semi-major axis (a): {result['a']} meters")
        lines.append(f"Semi-minor axis (b): {result['b']:.4f} meters")
        lines.append(f"Flattening (f):      {result['f']}  (1/f = {result['inverse_flattening']})")
        lines.append(f"Eccentricity² (e²):  {result['e2']}")
    elif command == 'elevation':
        lines.append(f"Elevation at ({result['latitude']}, {result['longitude']}): {result['elevation']} m")
    else:
        lines.append(result.get('message', 'OK'))
    return '\n'.join(lines)


def dispatch(handler: SkillHandler, args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into a handler command."""
    command = args.command
    if command == 'list':
        return handler.execute('list-crs')
    if command == 'define':
        return handler.execute('define-crs', {'name': args.name, 'proj4def': args.definition})
    if command == 'transform':
        return handler.execute('transform', {'from': args.from_crs, 'to': args.to_crs,
                                             'coordinates': args.coordinates})
    if command == 'china':
        return handler.execute('transform-china', {'from': args.from_crs, 'to': args.to_crs,
                                                   'coordinates': args.coordinates})
    if command == 'batch':
        name = 'batch-transform-china' if args.china else 'batch-transform'
        return handler.execute(name, {'from': args.from_crs, 'to': args.to_crs,
                                      'coordinates': args.coordinates})
    if command == 'info':
        return handler.execute('get-proj4-def', {'crs': args.crs})
    if command == 'inverse':
        return handler.execute('inverse-transform', {'from': args.from_crs, 'to': args.to_crs,
                                                     'test_point': args.point})
    if command == 'blh-to-xyz':
        return handler.execute('blh-to-xyz', {'lat': args.lat, 'lon': args.lon, 'height': args.height,
                                              'ellipsoid': args.ellipsoid})
    if command == 'xyz-to-blh':
        return handler.execute('xyz-to-blh', {'X': args.X, 'Y': args.Y, 'Z': args.Z,
                                              'ellipsoid': args.ellipsoid})
    if command == 'ellipsoid':
        return handler.execute('ellipsoid-info', {'ellipsoid': args.name})
    if command == 'elevation':
        return handler.execute('elevation', {'lat': args.lat, 'lon': args.lon})
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0
    if args.command == 'examples':
        print(EXAMPLES)
        return 0

    save = getattr(args, 'save', False)
    if save and not args.config:
        logger.error("--save requires --config")
        return 1

    try:
        if save and not Path(args.config).exists():
            settings = Settings()
        else:
            settings = load_settings(args.config)
        handler = SkillHandler(settings)

        result = dispatch(handler, args)

        if save and result.get('success'):
            settings.custom_crs[args.name] = args.definition
            settings.to_yaml(args.config)
            result['saved_to'] = args.config

        if args.json:
            print(json.dumps(result, indent=2))
        else:
            print(render(args.command, result, settings.precision))

        return 0 if result.get('success') else 1

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
