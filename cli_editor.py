#!/usr/bin/env python3
"""
CLI for editing PDF files without the API server.

Provides command-line access to split, insert, remove, render and AI text
extraction on local files.
"""
import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from openai import AsyncOpenAI

from config.settings import settings
from core.exceptions import PdfEditorError
from services import pdf_service, render_service
from services.text_extraction_service import TextExtractionService
from utils.file_utils import detect_mime_type, ensure_insertable, is_pdf, split_filenames
from utils.logging import configure_logging


def _read(path: str) -> bytes:
    return Path(path).read_bytes()


def _write(path: str, content: bytes):
    Path(path).write_bytes(content)
    print(f"✓ Wrote {path} ({len(content)} bytes)")


def info_cli(file_path: str):
    """Print page count and page sizes."""
    content = _read(file_path)
    sizes = render_service.page_sizes(content)
    print(f"File: {file_path}")
    print(f"Pages: {len(sizes)}")
    for number, (width, height) in enumerate(sizes, start=1):
        print(f"  {number:>4}: {width:.1f} x {height:.1f} pt")


def split_cli(file_path: str, split_page: int, output_dir: str = None):
    """Split a PDF into two files named after the page ranges."""
    content = _read(file_path)
    total_pages = pdf_service.get_page_count(content)
    result = pdf_service.split_pdf(content, split_page)

    out_dir = Path(output_dir or os.path.dirname(os.path.abspath(file_path)))
    first_name, second_name = split_filenames(os.path.basename(file_path), split_page, total_pages)
    _write(str(out_dir / first_name), result.first_half)
    _write(str(out_dir / second_name), result.second_half)


def remove_cli(file_path: str, page_number: int, output: str):
    """Remove one page."""
    _write(output, pdf_service.remove_page_from_pdf(_read(file_path), page_number))


def insert_cli(file_path: str, insert_path: str, after: int, output: str):
    """Insert an image page or the pages of another PDF."""
    mime_type = detect_mime_type(insert_path)
    ensure_insertable(mime_type)
    content = _read(file_path)
    inserted = _read(insert_path)

    if is_pdf(mime_type):
        updated = pdf_service.add_pdf_to_pdf(content, inserted, after)
    else:
        updated = pdf_service.add_image_to_pdf(content, inserted, mime_type, after)
    _write(output, updated)


def render_cli(file_path: str, page_number: int, scale: float, output: str):
    """Render a page to PNG."""
    rendered = render_service.render_page(_read(file_path), page_number, scale=scale)
    _write(output, rendered.data)
    print(f"  {rendered.width} x {rendered.height} px at scale {rendered.scale}")


async def extract_text_cli(file_path: str, page_number: int, scale: float):
    """Print text blocks detected by the AI model as JSON."""
    client = AsyncOpenAI(api_key=settings.ai_api_key or "not-set", base_url=settings.ai_base_url)
    service = TextExtractionService(
        client=client,
        model=settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature
    )
    extraction = await service.extract_text_from_page(
        _read(file_path), page_number, scale=scale, quality=settings.jpeg_quality
    )
    print(json.dumps({
        'page_number': extraction.page_number,
        'render_scale': extraction.render_scale,
        'image_size': [extraction.image_width, extraction.image_height],
        'blocks': [block.to_dict() for block in extraction.blocks]
    }, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='PDF editor command line'
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    info_parser = subparsers.add_parser('info', help='Show page count and sizes')
    info_parser.add_argument('file', type=str, help='PDF file')

    split_parser = subparsers.add_parser('split', help='Split a PDF after a page')
    split_parser.add_argument('file', type=str, help='PDF file')
    split_parser.add_argument('split_page', type=int, help='Last page of the first half (1-based)')
    split_parser.add_argument('-d', '--output-dir', type=str, help='Directory for the two halves')

    remove_parser = subparsers.add_parser('remove', help='Remove a page')
    remove_parser.add_argument('file', type=str, help='PDF file')
    remove_parser.add_argument('page', type=int, help='Page to remove (1-based)')
    remove_parser.add_argument('-o', '--output', type=str, required=True, help='Output file path')

    insert_parser = subparsers.add_parser('insert', help='Insert an image or PDF')
    insert_parser.add_argument('file', type=str, help='PDF file')
    insert_parser.add_argument('insert', type=str, help='PNG, JPEG or PDF to insert')
    insert_parser.add_argument('--after', type=int, default=0, help='Insert after this page (0 = at the start)')
    insert_parser.add_argument('-o', '--output', type=str, required=True, help='Output file path')

    render_parser = subparsers.add_parser('render', help='Render a page to PNG')
    render_parser.add_argument('file', type=str, help='PDF file')
    render_parser.add_argument('page', type=int, help='Page number (1-based)')
    render_parser.add_argument('--scale', type=float, default=settings.render_scale, help='Render scale')
    render_parser.add_argument('-o', '--output', type=str, required=True, help='Output PNG path')

    extract_parser = subparsers.add_parser('extract-text', help='Detect text blocks with the AI model')
    extract_parser.add_argument('file', type=str, help='PDF file')
    extract_parser.add_argument('page', type=int, help='Page number (1-based)')
    extract_parser.add_argument('--scale', type=float, default=settings.render_scale, help='Render scale')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(settings.log_level, json_output=False)

    if not os.path.exists(args.file):
        print(f"❌ Error: File not found: {args.file}")
        return 1

    try:
        if args.command == 'info':
            info_cli(args.file)
        elif args.command == 'split':
            split_cli(args.file, args.split_page, args.output_dir)
        elif args.command == 'remove':
            remove_cli(args.file, args.page, args.output)
        elif args.command == 'insert':
            insert_cli(args.file, args.insert, args.after, args.output)
        elif args.command == 'render':
            render_cli(args.file, args.page, args.scale, args.output)
        elif args.command == 'extract-text':
            asyncio.run(extract_text_cli(args.file, args.page, args.scale))
    except PdfEditorError as e:
        print(f"❌ Error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
