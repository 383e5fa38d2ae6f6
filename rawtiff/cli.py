"""CLI interface for rawtiff -- info, dirs, footer, copy subcommands."""

import json
import sys
from pathlib import Path

import click

import rawtiff
from rawtiff.config import ParserConfig
from rawtiff.errors import RawTiffError
from rawtiff.formats import detect_format
from rawtiff.log import (
    cli_bold,
    cli_dim,
    cli_error,
    cli_header,
    cli_info,
    cli_separator,
    cli_success,
    cli_warning,
    configure_logging,
    log_error,
    log_info,
)
from rawtiff.models import DirectorySummary
from rawtiff.raw_footer import RawFooterReader
from rawtiff.tiff import TiffHandler


class _Output:
    """Echo to the terminal and optionally mirror plain lines to a log file."""

    def __init__(self, log_path=None):
        self.log_file = open(log_path, 'w') if log_path else None

    def echo(self, msg: str, plain: str = None):
        click.echo(msg)
        if self.log_file:
            self.log_file.write(log_info(plain if plain is not None else msg) + '\n')
            self.log_file.flush()

    def error(self, msg: str):
        click.echo(cli_error(f'Error: {msg}'), err=True)
        if self.log_file:
            self.log_file.write(log_error(msg) + '\n')
            self.log_file.flush()

    def close(self):
        if self.log_file:
            self.log_file.close()
            self.log_file = None


def _load_config(config_path):
    if config_path is None:
        return ParserConfig.default()
    return ParserConfig.from_json(config_path)


def _fail(out: _Output, exc: Exception):
    out.error(str(exc))
    out.close()
    sys.exit(1)


@click.group()
@click.version_option(version=rawtiff.__version__, prog_name='rawtiff')
@click.option('--debug', is_flag=True, help='Log parser internals to stderr.')
@click.option('--log', 'log_path', type=click.Path(), help='Mirror output to a log file.')
@click.pass_context
def main(ctx, debug, log_path):
    """rawtiff -- inspect TIFF/DNG directories and Magic Lantern RAW footers."""
    configure_logging(debug)
    out = _Output(log_path)
    ctx.obj = out
    ctx.call_on_close(out.close)


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='JSON file with parser limits.')
@click.pass_obj
def info(out, path, config_path):
    """Show a short summary of a TIFF or RAW file."""
    filepath = Path(path)
    fmt = detect_format(filepath)

    out.echo(f'File: {filepath.name}')
    out.echo(f'Format: {fmt}')

    try:
        if fmt == 'tiff':
            handler = TiffHandler.open(filepath, _load_config(config_path))
            for key, value in handler.get_format_info().items():
                if key != 'format':
                    out.echo(f'{key}: {value}')
            if handler.first_cfa_directory() is None:
                out.echo(cli_warning('No raw (CFA) directory found'),
                         'No raw (CFA) directory found')
        elif fmt == 'raw':
            with RawFooterReader(filepath) as reader:
                out.echo(f'Frames: {reader.get_frame_count()} @ '
                         f'{reader.get_frame_rate():.3f} fps')
                out.echo(f'Dimensions: {reader.get_width()}x{reader.get_height()}')
                out.echo(f'Bits per pixel: {reader.get_bits_per_pixel()}')
        else:
            out.error(f'{filepath.name} is neither a TIFF nor a RAW sequence')
            sys.exit(1)
    except RawTiffError as e:
        _fail(out, e)


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True, help='List the tags of every directory.')
@click.option('--json-out', type=click.Path(), help='Write the directory list as JSON.')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='JSON file with parser limits.')
@click.pass_obj
def dirs(out, path, verbose, json_out, config_path):
    """List every directory in a TIFF file's IFD chain."""
    filepath = Path(path)
    try:
        handler = TiffHandler.open(filepath, _load_config(config_path))
        summaries = [DirectorySummary.from_directory(i, d, handler.buffer)
                     for i, d in enumerate(handler.directories)]
    except RawTiffError as e:
        _fail(out, e)

    out.echo(cli_header(f'{filepath.name}: {len(summaries)} directories'),
             f'{filepath.name}: {len(summaries)} directories')

    for s in summaries:
        kind = f'SubIFD of {s.parent_offset}' if s.parent_offset is not None else 'IFD'
        dims = f' {s.dimensions[0]}x{s.dimensions[1]}' if s.dimensions else ''
        line = (f'  [{s.index}] {kind} @ {s.offset}: {len(s.tags)} tags,'
                f'{dims} photometric={s.photometric}')
        out.echo(cli_bold(line), line)
        if verbose:
            for t in s.tags:
                where = 'inline' if t.inline else 'offset'
                detail = f'({t.tag_id}, type {t.dtype}, x{t.count}, {where})'
                out.echo(f'    {t.tag_name} {cli_dim(detail)} = {t.value_preview}',
                         f'    {t.tag_name} {detail} = {t.value_preview}')

    if json_out:
        with open(json_out, 'w') as f:
            json.dump([s.to_dict() for s in summaries], f, indent=2)
        out.echo(cli_info(f'Results written to {json_out}'), f'Results written to {json_out}')


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json-out', type=click.Path(), help='Write the footer fields as JSON.')
@click.pass_obj
def footer(out, path, json_out):
    """Dump the footer of a Magic Lantern RAW sequence."""
    try:
        with RawFooterReader(path) as reader:
            raw = reader.info()
    except RawTiffError as e:
        _fail(out, e)

    out.echo(cli_header('Raw file footer'), 'Raw file footer')
    out.echo(f'  Magic:           {raw.magic}')
    out.echo(f'  Width:           {raw.width}')
    out.echo(f'  Height:          {raw.height}')
    out.echo(f'  Bytes per frame: {raw.frame_size}')
    out.echo(f'  Frames in file:  {raw.frame_count}')
    out.echo(f'  Frame skip:      {raw.frame_skip}')
    out.echo(f'  Frame rate:      {raw.frame_rate}')
    out.echo(cli_separator(), '-' * 60)
    out.echo(cli_header('Raw info'), 'Raw info')
    out.echo(f'  API version:     {raw.api_version}')
    out.echo(f'  Width:           {raw.raw_width}')
    out.echo(f'  Height:          {raw.raw_height}')
    out.echo(f'  Pitch:           {raw.pitch}')
    out.echo(f'  Frame size:      {raw.raw_frame_size}')
    out.echo(f'  Bits per pixel:  {raw.bits_per_pixel}')
    out.echo(f'  Black level:     {raw.black_level}')
    out.echo(f'  White level:     {raw.white_level}')
    out.echo(f'  Crop x, y, w, h: {", ".join(str(v) for v in raw.crop_rect)}')
    out.echo(f'  Active area:     {", ".join(str(v) for v in raw.active_area)}')
    out.echo(f'  Dynamic range:   {raw.dynamic_range} EV')

    if json_out:
        with open(json_out, 'w') as f:
            json.dump(raw.to_dict(), f, indent=2)
        out.echo(cli_info(f'Results written to {json_out}'), f'Results written to {json_out}')


@main.command()
@click.argument('src', type=click.Path(exists=True, dir_okay=False))
@click.argument('dst', type=click.Path(dir_okay=False))
@click.pass_obj
def copy(out, src, dst):
    """Re-save a TIFF file byte-for-byte after validating its structure."""
    try:
        handler = TiffHandler.open(src)
        handler.save_as(dst)
    except RawTiffError as e:
        _fail(out, e)
    out.echo(cli_success(f'Saved {len(handler.buffer)} bytes to {dst}'),
             f'Saved {len(handler.buffer)} bytes to {dst}')


if __name__ == '__main__':
    main()
