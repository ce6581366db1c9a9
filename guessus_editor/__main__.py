"""
Entry point for running as a module: python -m guessus_editor

Usage:
    python -m guessus_editor                                  # Run web app
    python -m guessus_editor --duplicates adult               # Duplicate report
    python -m guessus_editor --duplicates adult --cross       # Cross-category only
    python -m guessus_editor --stats family                   # Word counts
    python -m guessus_editor --export adult out.json [--rich] # Save to a file
"""

import sys
import json


def _arg_after(args, flag, default=None):
    for i, arg in enumerate(args):
        if arg == flag and i + 1 < len(args):
            return args[i + 1]
    return default


def _load(variant):
    from .dictionary import DictionaryManager
    from .fetchers import DictionaryFetcher

    mgr = DictionaryManager.load(variant)
    if mgr is not None:
        print(f"📝 Using local draft for {variant}")
        return mgr
    dictionary, version = DictionaryFetcher().fetch(variant)
    return DictionaryManager(variant, dictionary, version)


def main():
    args = sys.argv[1:]

    if '--help' in args or '-h' in args:
        print(__doc__)

    elif '--duplicates' in args:
        from .dictionary import find_duplicates, summarize

        variant = _arg_after(args, '--duplicates', 'adult')
        mgr = _load(variant)
        groups = find_duplicates(mgr.dictionary, cross_category_only='--cross' in args)

        print("\n" + "=" * 60)
        print(f"🔍 Duplicates in {variant} v{mgr.version.version}")
        print("=" * 60)
        for lang, count in summarize(groups).items():
            print(f"  {lang}: {count}")

        for group in groups:
            places = ', '.join(f"{cat}#{idx}" for cat, idx in group.locations)
            print(f"  [{group.language}] {group.texts[0]} -> {places}")

        if not groups:
            print("  ✓ No duplicates")

    elif '--stats' in args:
        variant = _arg_after(args, '--stats', 'adult')
        mgr = _load(variant)
        stats = mgr.stats()

        print(f"\n📊 {variant} v{mgr.version.version} ({mgr.version.updated_at})")
        print(f"Total words: {stats['total']} in {stats['rows']} rows")
        for lang, count in stats['byLanguage'].items():
            print(f"  {lang}: {count}")
        for category_id, info in stats['byCategory'].items():
            print(f"  {category_id}: {info['rows']} rows")
        if stats['incomplete']:
            print(f"⚠ {stats['incomplete']} rows are missing a translation")

    elif '--export' in args:
        from .dictionary import dump_dictionary, FORMAT_LEGACY, FORMAT_RICH

        variant = _arg_after(args, '--export', 'adult')
        position = args.index('--export')
        if position + 2 >= len(args):
            print("⚠ Usage: --export <variant> <path> [--rich]")
            sys.exit(2)
        output = args[position + 2]

        mgr = _load(variant)
        fmt = FORMAT_RICH if '--rich' in args else FORMAT_LEGACY
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(dump_dictionary(mgr.dictionary, fmt), f, indent=2, ensure_ascii=False)
        print(f"✓ Wrote {variant} ({fmt}) to {output}")

    else:
        from .app import main as app_main
        app_main()


if __name__ == '__main__':
    main()
