"""
Board generator for wordgrid.

Usage:
    python -m scripts.generate [--density N] [--size N] [--minimum N] [--seed N]

Examples:
    python -m scripts.generate --density 2 --size 5
    python -m scripts.generate --seed 1234 --timer allotment
    python -m scripts.generate --letters T,A,P,E,I,N,S,O,E,D,R,L,K,G,H,M

This will:
  1. Load the dice and the word list (building the word cache if needed)
  2. Search for a board whose word count fits the density, or replay --letters
  3. Print the board, the maximum score and the words found
"""
import argparse
import logging
import sys
from concurrent.futures import TimeoutError as FuturesTimeout
from pathlib import Path

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wordgrid.settings import settings, update_settings, log_level, TIMER_NAMES
from wordgrid.generator import Generator, GenerationRequest
from wordgrid.solver import Solver, ranked_words
from wordgrid.sources import WordCache


def main():
    parser = argparse.ArgumentParser(description="wordgrid board generator")
    parser.add_argument("--density", type=int, choices=[0, 1, 2, 3], default=settings.DENSITY,
                        help="0=sparse, 1=normal, 2=dense, 3=random")
    parser.add_argument("--size", type=int, choices=[4, 5], default=settings.BOARD_SIZE,
                        help=f"Board size (default: {settings.BOARD_SIZE})")
    parser.add_argument("--minimum", type=int, default=settings.MIN_WORD_LENGTH,
                        help=f"Minimum word length (default: {settings.MIN_WORD_LENGTH})")
    parser.add_argument("--timer", choices=TIMER_NAMES, default=settings.TIMER,
                        help="Time mode; allotment scores only the best 30 words")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (default: fresh)")
    parser.add_argument("--letters", type=str, default=None,
                        help="Comma-separated letters of a saved board to replay")
    parser.add_argument("--dice", type=str, default=str(settings.DICE_PATH),
                        help="Path to the dice file")
    parser.add_argument("--words", type=str, default=str(settings.WORDS_PATH),
                        help="Path to the word list")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Cancel the search after this many seconds")
    parser.add_argument("--debug", action="store_true", default=settings.DEBUG,
                        help="Log at DEBUG level")
    parser.add_argument("--paths", action="store_true",
                        help="Print the cell paths of every word")
    args = parser.parse_args()

    errors = update_settings(settings, BOARD_SIZE=args.size, MIN_WORD_LENGTH=args.minimum,
                             DENSITY=args.density, TIMER=args.timer, DEBUG=args.debug)
    if errors:
        for name, message in errors.items():
            print(f"Error: {name}: {message}")
        sys.exit(2)

    logging.basicConfig(level=log_level(settings), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    letters = [l.strip().upper() for l in args.letters.split(",")] if args.letters else []
    request = GenerationRequest(
        density=settings.DENSITY,
        size=settings.BOARD_SIZE,
        minimum=settings.MIN_WORD_LENGTH,
        timer=settings.TIMER,
        letters=letters,
        seed=args.seed,
    )

    def on_event(name: str):
        if name == "optimizing_started":
            print("Building word cache, this may take a moment...")

    with Generator(args.dice, args.words, WordCache(settings.CACHE_DIR), on_event) as generator:
        future = generator.create(request)
        try:
            result = future.result(timeout=args.timeout)
        except FuturesTimeout:
            generator.cancel()
            result = None

    if result is None:
        print("Generation canceled")
        sys.exit(1)
    if not result.ok:
        print(f"Error: {result.error}")
        sys.exit(1)

    size = request.size
    print(f"\nBoard ({size}x{size}, density={result.density}, seed={result.seed}):")
    print("-" * (size * 5 + 1))
    for r in range(size):
        row = result.letters[r * size:(r + 1) * size]
        print("|" + "|".join(f" {l:<2} " for l in row) + "|")
    print("-" * (size * 5 + 1))

    words = ranked_words(result.solutions)
    print(f"\n{len(words)} words, maximum score {result.max_score}\n")
    for word in words:
        line = f"  {word:<{size * size}} {Solver.word_score(word):>2}"
        if args.paths:
            line += "  " + " ".join(str(list(p)) for p in result.solutions[word])
        print(line)


if __name__ == "__main__":
    main()
