#!/usr/bin/env python3
import argparse
import dataclasses
import json
import logging
import sys

from .config_manager import get_config_from_env
from .debug_utils import debug_tree
from .exceptions import MimeTextError
from .mime_walker import parse_file
from .text_body import find_html_body, find_text_body

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Extract the readable body of MIME messages')
    parser.add_argument('files', nargs='+', help='Message files to parse')
    parser.add_argument('-o', '--output', help='Output JSON file')
    parser.add_argument('--compact', action='store_true', help='Compact JSON output')
    parser.add_argument('--html', action='store_true', help='Select the HTML body instead of plain text')
    parser.add_argument('--tree', action='store_true', help='Include the full MIME tree in the output')
    parser.add_argument('--outline', action='store_true', help='Log an outline of each MIME tree')
    parser.add_argument('--max-depth', type=int,
                        help='Maximum multipart nesting depth, 0 for unlimited (default: 10)')
    parser.add_argument('--log-file', help='Write log to specified file')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    try:
        config = get_config_from_env()
    except ValueError as e:
        print(f'Invalid configuration: {e}', file=sys.stderr)
        return 2

    if args.max_depth is not None:
        config = dataclasses.replace(
            config,
            security=dataclasses.replace(config.security, max_nested_depth=args.max_depth or None),
        )

    log_level = logging.DEBUG if args.debug else getattr(logging, config.logging.level)
    logging.basicConfig(
        level=log_level,
        filename=args.log_file,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    results = []
    for file_path in args.files:
        try:
            root = parse_file(file_path, config)
            if args.outline:
                debug_tree(root)

            result = {'source': file_path}
            if args.html:
                result['body'] = find_html_body(root)
            else:
                body = find_text_body(root, config.processing.html_parser)
                result['body'] = body.text
                result['converted_from_html'] = body.converted_from_html
            if args.tree:
                result['tree'] = root.to_dict()
            results.append(result)
        except (MimeTextError, OSError) as e:
            logger.error(f"Error parsing {file_path}: {e}")
            results.append({
                'source': file_path,
                'error': str(e)
            })

    successful = len([r for r in results if 'error' not in r])
    output = {
        'results': results,
        'total_files': len(results),
        'successful': successful,
    }

    json_str = json.dumps(output, indent=None if args.compact else 2, ensure_ascii=False)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(json_str)
        logger.info(f"Results saved to: {args.output}")
    else:
        print(json_str)

    return 0 if successful == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
