"""
PDF Chunk Reader
Extracts the text of the grammar guide PDF and splits it into fixed-size
chunks that fit in a model prompt.

Usage:
    python -m scripts.pdf_chunk_reader --pdf grammar_guide.pdf --output pdf-chunks
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent
DEFAULT_PDF_PATH = ROOT_DIR / 'grammar_guide.pdf'
DEFAULT_OUTPUT_DIR = ROOT_DIR / 'pdf-chunks'
CHUNK_SIZE = 3000  # characters per chunk


def extract_text_from_pdf(pdf_path):
    """
    Read every page of a PDF.

    Returns:
        (full_text, page_texts) where page_texts is a list of (page_number, text)
        and full_text is every page followed by a blank line
    """
    reader = PdfReader(str(pdf_path))

    page_texts = []
    for number, page in enumerate(reader.pages, start=1):
        page_texts.append((number, page.extract_text() or ''))

    full_text = ''.join(f'{text}\n\n' for _, text in page_texts)
    return full_text, page_texts


def split_into_chunks(text, chunk_size=CHUNK_SIZE):
    """Slice text into sequential pieces of at most chunk_size characters."""
    if chunk_size < 1:
        raise ValueError('chunk_size must be positive')
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


def write_chunks(pdf_path, output_dir, chunk_size=CHUNK_SIZE):
    """
    Extract the PDF and write chunk, page, full-text and metadata files.

    Returns:
        The metadata dict written to metadata.json
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f'Reading PDF: {pdf_path}')
    full_text, page_texts = extract_text_from_pdf(pdf_path)
    chunks = split_into_chunks(full_text, chunk_size)

    for index, chunk in enumerate(chunks, start=1):
        (output_dir / f'chunk_{index:03d}.txt').write_text(chunk, encoding='utf-8')
        logger.debug(f'Saved chunk_{index:03d}.txt ({len(chunk)} chars)')

    for number, text in page_texts:
        (output_dir / f'page_{number:03d}.txt').write_text(text, encoding='utf-8')

    metadata = {
        'totalPages': len(page_texts),
        'totalCharacters': len(full_text),
        'totalChunks': len(chunks),
        'chunkSize': chunk_size,
        'processedAt': datetime.now(timezone.utc).isoformat(),
    }
    (output_dir / 'metadata.json').write_text(json.dumps(metadata, indent=2), encoding='utf-8')
    (output_dir / 'full_text.txt').write_text(full_text, encoding='utf-8')

    logger.info(
        f'{metadata["totalPages"]} pages, {metadata["totalCharacters"]} characters, '
        f'{metadata["totalChunks"]} chunks written to {output_dir}'
    )
    return metadata


def main(argv=None):
    parser = argparse.ArgumentParser(description='Split a PDF into text chunks')
    parser.add_argument('--pdf', default=str(DEFAULT_PDF_PATH), help='PDF file to read')
    parser.add_argument('--output', default=str(DEFAULT_OUTPUT_DIR), help='Directory for the output files')
    parser.add_argument('--chunk-size', type=int, default=CHUNK_SIZE, help='Characters per chunk')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')

    try:
        write_chunks(args.pdf, args.output, args.chunk_size)
    except (OSError, PdfReadError, ValueError) as e:
        logger.error(f'Error reading PDF: {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
