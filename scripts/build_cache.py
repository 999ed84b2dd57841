"""Build (or refresh) the word cache for a word list."""
import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wordgrid.settings import settings, log_level
from wordgrid.sources import SourceError, WordCache, load_words

logging.basicConfig(level=log_level(settings), format="%(asctime)s %(name)s %(levelname)s %(message)s")

parser = argparse.ArgumentParser(description="Build the word cache")
parser.add_argument("words", nargs="?", default=str(settings.WORDS_PATH))
parser.add_argument("--cache-dir", default=str(settings.CACHE_DIR))
parser.add_argument("--force", action="store_true", help="Rebuild even if the cache is fresh")
args = parser.parse_args()

cache = WordCache(args.cache_dir)
if args.force:
    cache.path_for(args.words).unlink(missing_ok=True)

try:
    trie = load_words(args.words, cache)
except SourceError as e:
    print(f"Error: {e}")
    sys.exit(1)

print(f"{len(trie)} words cached at {cache.path_for(args.words)}")
