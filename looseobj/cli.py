import argparse #command-line parsing
import logging
import os
import sys

from . import data
from .errors import LooseObjectError
from .header import KIND_NAMES
from .objects import compute_digest

logger = logging.getLogger(__name__)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    with data.change_git_dir(args.root):
        try:
            args.func(args)
        except (LooseObjectError, OSError) as e:
            logger.debug('command %s failed', args.command, exc_info=True)
            print(f'error: {e}', file=sys.stderr)
            return 1
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='looseobj')
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug messages to stderr')
    parser.add_argument('-C', dest='root', default='.', help='run as if started in this directory')
    commands = parser.add_subparsers(dest='command')
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)

    hash_object_parser = commands.add_parser('hash-object')
    hash_object_parser.set_defaults(func=hash_object)
    hash_object_parser.add_argument('file')
    hash_object_parser.add_argument(
        '-t', '--type',
        default='blob',
        choices=KIND_NAMES,
        help='object type (default: blob)',
    )
    hash_object_parser.add_argument('-w', '--write', action='store_true', help='store the object')

    cat_file_parser = commands.add_parser('cat-file')
    cat_file_parser.set_defaults(func=cat_file)
    show = cat_file_parser.add_mutually_exclusive_group(required=True)
    show.add_argument('-t', dest='show', action='store_const', const='type', help='print the object kind')
    show.add_argument('-s', dest='show', action='store_const', const='size', help='print the content size')
    show.add_argument('-p', dest='show', action='store_const', const='content', help='print the content')
    cat_file_parser.add_argument('object')

    ls_objects_parser = commands.add_parser('ls-objects')
    ls_objects_parser.set_defaults(func=ls_objects)

    return parser.parse_args(argv)


def init(args):
    data.init()
    print(f'Initialized empty looseobj repository in {os.path.abspath(data.GIT_DIR)}')


def hash_object(args):
    with open(args.file, 'rb') as f: #streamed, never read whole
        if args.write:
            print(data.hash_object(f, type_=args.type))
        else:
            print(compute_digest(f, args.type))


def cat_file(args):
    obj = data.object_store()[args.object]
    if args.show == 'type':
        print(obj.kind.value)
    elif args.show == 'size':
        print(len(obj.content))
    else:
        sys.stdout.flush()
        sys.stdout.buffer.write(obj.content)


def ls_objects(args):
    for digest in data.object_store().iter_digests():
        print(digest)


if __name__ == '__main__':
    sys.exit(main())
