"""
Main Application Module

Command line interface for training identities and recognizing faces.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG_PATH, load_config
from .recognizer import FaceRecognizer

logger = logging.getLogger(__name__)


def setup_logging(config: Dict[str, Any], verbose: bool = False):
    """Configure root logging from the ``logging`` config section."""
    logging_config = config.get('logging', {})
    level = 'DEBUG' if verbose else logging_config.get('level', 'INFO')

    handlers = [logging.StreamHandler(sys.stdout)]
    if logging_config.get('file'):
        handlers.append(logging.FileHandler(logging_config['file']))

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


class FaceLibraryApp:
    """Face library application."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.recognizer = FaceRecognizer(config)

    def train(self, first_name: str, last_name: str, images: List[str]) -> int:
        record = self.recognizer.register_identity(first_name, last_name, images)
        if not record.is_trained():
            print(f"No faces found for {record.key}, identity stored untrained")
            return 1
        print(f"Trained {record.key} on {len(record.training_images)} faces")
        return 0

    def recognize(self, image: str, as_json: bool = False) -> int:
        result = self.recognizer.recognize(image)
        if as_json:
            print(json.dumps(result.to_dict(), indent=2))
        elif result.matched:
            print(f"{result.key} ({result.score:.10f})")
        else:
            print("No match")
        return 0 if result.matched else 1

    def compare(self, face: str) -> int:
        path = self.recognizer.compare_face(face)
        if path is None:
            print(f"Could not render {face}")
            return 1
        print(f"Rendered {face} to {path}")
        return 0

    def list_identities(self) -> int:
        identities = self.recognizer.store.identities()
        print(f"Known identities ({len(identities)}):")
        for key, record in identities.items():
            status = 'trained' if record.is_trained() else 'untrained'
            print(f"  {key}: {len(record.training_images)} faces, {status}")
        return 0

    def statistics(self) -> int:
        print(json.dumps(self.recognizer.get_recognition_statistics(), indent=2))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Face library: train identities and recognize faces')
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
    parser.add_argument('--verbose', action='store_true', help='Log per-identity scores')

    subparsers = parser.add_subparsers(dest='command')
    subparsers.required = True

    train_parser = subparsers.add_parser('train', help='Register an identity from training images')
    train_parser.add_argument('first_name')
    train_parser.add_argument('last_name')
    train_parser.add_argument('images', nargs='+', help='Training photographs')

    recognize_parser = subparsers.add_parser('recognize', help='Recognize the person in an image')
    recognize_parser.add_argument('image')
    recognize_parser.add_argument('--json', action='store_true', help='Print the full result as JSON')

    compare_parser = subparsers.add_parser('compare', help='Render a face as an average face')
    compare_parser.add_argument('face')

    subparsers.add_parser('list', help='List known identities')
    subparsers.add_parser('stats', help='Print store statistics')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(config, args.verbose)

    app = FaceLibraryApp(config)
    try:
        if args.command == 'train':
            return app.train(args.first_name, args.last_name, args.images)
        if args.command == 'recognize':
            return app.recognize(args.image, args.json)
        if args.command == 'compare':
            return app.compare(args.face)
        if args.command == 'list':
            return app.list_identities()
        return app.statistics()
    finally:
        app.recognizer.close()


if __name__ == '__main__':
    sys.exit(main())
