from __future__ import annotations

import logging

from smartstock.application.container import build_container
from smartstock.config import get_app_paths, load_policy
from smartstock.logging_config import setup_logging

log = logging.getLogger(__name__)


def main() -> None:
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    app = build_container(paths.store_path, policy=load_policy(), seed_demo_data=True)
    user = app.auth.current_user()
    stats = app.reporting.dashboard()
    log.info("app_started store=%s user=%s", paths.store_path, user.username if user else None)

    print(f"SmartStock: {user.username} ({user.role.value})" if user else "SmartStock: not logged in")
    print(f"Products:        {stats.total_products}")
    print(f"Raw materials:   {stats.total_raw_materials}")
    print(f"Low stock items: {stats.low_stock_items}")
    print(f"Today's sales:     {stats.today_sales:.2f}")
    print(f"Today's purchases: {stats.today_purchases:.2f}")
    print(f"Total revenue:     {stats.total_revenue:.2f}")
    print(f"Total costs:       {stats.total_costs:.2f}")
    print(f"Profit:            {stats.profit:.2f}")

    low = app.reporting.low_stock_items()
    for item in low[:5]:
        print(f"  ! {item.name} ({item.kind.label}): {item.stock} {item.unit} left, min {item.min_threshold}")
    if len(low) > 5:
        print(f"  +{len(low) - 5} more items need attention")


if __name__ == "__main__":
    main()
