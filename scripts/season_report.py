from __future__ import annotations

import argparse
import json

from api.observability import configure_logging
from core.config import get_settings
from core.services.draft_store import DraftStore
from core.services.season_index import calendar, total_weeks


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the global week index of the stored season documents.")
    parser.add_argument("--which", choices=["draft", "published"], default="draft")
    parser.add_argument("--json", action="store_true", help="emit the flattened weeks as JSON")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    store = DraftStore.from_settings(settings)
    season = store.load_draft() if args.which == "draft" else store.load_published()
    if season is None:
        print(f"{args.which}_exists=False path={settings.draft_path if args.which == 'draft' else settings.published_path}")
        return 1

    rows = calendar(season)
    if args.json:
        print(json.dumps(rows, indent=2))
        return 0

    print(f"season_id={season.season_id} status={season.status} start_date={season.start_date}")
    print(f"blocks={len(season.blocks)} weeks={total_weeks(season)} markers={len(season.season_markers)}")
    block_names = {b.block_id: b.name for b in season.blocks}
    for row in rows:
        markers = ",".join(row["markers"])
        print(f"{row['globalIndex']:>3} {row['weekStart'] or '-':<10} {block_names[row['blockId']]:<24} {row['weekId']} {markers}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
