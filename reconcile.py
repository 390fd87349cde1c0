from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cost_reconcile.exceptions import ReconcileError
from cost_reconcile.io_utils import dump_mapping
from cost_reconcile.pipeline import ReconcileOptions, reconcile
from cost_reconcile.schema import DEFAULT_MATCH_TOLERANCE, DEFAULT_SCAN_LIMIT


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Đối chiếu chi phí container giữa hai bên (A/B) từ các file Excel/CSV.")
    parser.add_argument(
        "--file-a",
        type=Path,
        action="append",
        required=True,
        help="File của bên A; lặp lại tham số để thêm nhiều file.",
    )
    parser.add_argument(
        "--file-b",
        type=Path,
        action="append",
        required=True,
        help="File của bên B; lặp lại tham số để thêm nhiều file.",
    )
    parser.add_argument(
        "--sheet-a",
        action="append",
        help='Sheet bên A cần dùng, dạng "file.xlsx::Sheet1" hoặc chỉ "Sheet1" (mặc định: tất cả).',
    )
    parser.add_argument(
        "--sheet-b",
        action="append",
        help='Sheet bên B cần dùng, dạng "file.xlsx::Sheet1" hoặc chỉ "Sheet1" (mặc định: tất cả).',
    )
    parser.add_argument(
        "--mapping-a",
        type=Path,
        help="File JSON ánh xạ cột cho bên A, thay cho gợi ý tự động.",
    )
    parser.add_argument(
        "--mapping-b",
        type=Path,
        help="File JSON ánh xạ cột cho bên B, thay cho gợi ý tự động.",
    )
    parser.add_argument(
        "--save-mappings",
        type=Path,
        help="Thư mục lưu ánh xạ đã dùng (mapping_a.json, mapping_b.json) để chỉnh sửa lại.",
    )
    parser.add_argument(
        "--report-path",
        type=Path,
        help="Ghi kết quả đối chiếu ra file .xlsx hoặc .csv.",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_MATCH_TOLERANCE,
        help="Chênh lệch tuyệt đối nhỏ hơn giá trị này được coi là khớp (mặc định: 1.0).",
    )
    parser.add_argument(
        "--scan-limit",
        type=int,
        default=DEFAULT_SCAN_LIMIT,
        help="Số dòng đầu tiên được quét để tìm dòng tiêu đề (mặc định: 20).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="In log chi tiết (DEBUG).",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> ReconcileOptions:
    return ReconcileOptions(
        files_a=args.file_a,
        files_b=args.file_b,
        sheets_a=args.sheet_a,
        sheets_b=args.sheet_b,
        mapping_a_path=args.mapping_a,
        mapping_b_path=args.mapping_b,
        report_path=args.report_path,
        tolerance=args.tolerance,
        scan_limit=args.scan_limit,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = reconcile(build_options(args))
    except (ReconcileError, FileNotFoundError) as exc:
        print(f"Lỗi: {exc}", file=sys.stderr)
        return 1

    if args.save_mappings:
        dump_mapping(result.mapping_a, args.save_mappings / "mapping_a.json")
        dump_mapping(result.mapping_b, args.save_mappings / "mapping_b.json")

    summary = result.summary
    print("=== Đối chiếu hoàn tất ===")
    print(
        f"Tổng {summary.total} container: khớp {summary.matched}, lệch {summary.mismatched}, "
        f"thiếu ở A {summary.missing_a}, thiếu ở B {summary.missing_b}."
    )
    print(f"Chênh lệch ròng (A - B): {summary.net_diff:,.2f}")
    for failed in result.failed_files:
        print(f"Bỏ qua file lỗi {failed.file_name}: {failed.error}")
    if result.report_path:
        print(f"Báo cáo: {result.report_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
