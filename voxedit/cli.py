"""
Command Line Interface for voxedit.

Usage:
    voxedit info memo.wav
    voxedit waveform memo.wav --points 200
    voxedit silence memo.wav --threshold -40 --min-duration 0.25
    voxedit trim memo.wav 1.5 12.0 -o trimmed.wav
    voxedit cut memo.wav 3.0 4.5
    voxedit remove-silence memo.wav --padding 0.05
"""

import asyncio
import json
import logging
import shutil
import sys
from pathlib import Path

import click

from . import __version__
from .core.errors import VoxEditError


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _finish(result, output):
    """Report an edit result and move the new file to ``output`` if given."""
    if not result.success:
        raise click.ClickException(str(result))
    final = Path(result.output_file)
    if output is not None:
        final = Path(shutil.move(str(final), str(output)))
    click.echo(f"✅ {result.operation}: {result.new_duration:.2f}s")
    if result.removed_ranges_count is not None:
        click.echo(f"✂️  Removed {result.removed_ranges_count} range(s), {result.removed_duration:.2f}s")
    click.echo(f"💾 {final}")


@click.group()
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
def cli(verbose):
    """voxedit: waveform analysis and editing for voice recordings."""
    _setup_logging(verbose)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--threshold', type=float, default=-40.0, help='Silence threshold in dBFS')
@click.option('--min-duration', type=float, default=0.25, help='Minimum silence length (s)')
def info(input_file, threshold, min_duration):
    """Show audio file information and silence analysis."""
    from .analyzer.audio import AudioAnalyzer
    from .analyzer.silence import SilenceDetector

    input_path = Path(input_file)
    try:
        file_info = AudioAnalyzer.get_info(input_path)
        audio, sr = AudioAnalyzer.load(input_path)
    except VoxEditError as e:
        raise click.ClickException(str(e))

    duration = AudioAnalyzer.get_duration(audio, sr)
    detector = SilenceDetector(silence_thresh_db=threshold, min_silence_s=min_duration)
    silences = detector.detect(audio, sr)
    speech = detector.speech_segments(audio, sr, silences)
    total_silence = sum(s.duration for s in silences)

    click.echo(f"📁 File: {input_path}")
    click.echo(f"📊 Duration: {duration:.3f}s")
    click.echo(f"🎵 Sample rate: {file_info['sample_rate']} Hz")
    click.echo(f"🔊 Channels: {file_info['channels']}")
    click.echo(f"📦 Format: {file_info['format']} ({file_info['subtype']})")
    click.echo("\n🔍 Analysis:")
    click.echo(f"   Speech regions: {len(speech)}")
    click.echo(f"   Silence regions: {len(silences)}")
    if duration > 0:
        click.echo(f"   Silence time: {total_silence:.3f}s ({total_silence / duration * 100:.1f}%)")


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--start', type=float, default=0.0, help='Range start (s)')
@click.option('--end', type=float, default=None, help='Range end (s, default: end of file)')
@click.option('-n', '--points', type=int, default=100, help='Number of points to return')
@click.option('--zoom', type=float, default=None, help='Report the level chosen for this zoom')
@click.option('--width', type=float, default=300.0, help='View width used with --zoom')
def waveform(input_file, start, end, points, zoom, width):
    """Print waveform points for a time range as JSON."""
    from .core.cache import AnalysisCache

    cache = AnalysisCache()
    try:
        pyramid = asyncio.run(cache.get_waveform(input_file))
    except VoxEditError as e:
        raise click.ClickException(str(e))

    end = pyramid.duration_seconds if end is None else end
    payload = {
        "duration": pyramid.duration_seconds,
        "start": start,
        "end": end,
        "level": pyramid.level_for_range(start, end, points),
        "points": [round(float(v), 4) for v in pyramid.slice(start, end, points)],
    }
    if zoom is not None:
        payload["zoom_level"] = pyramid.level_for_zoom(zoom, width)[0]
    click.echo(json.dumps(payload))


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--threshold', type=float, default=-40.0, help='Silence threshold in dBFS')
@click.option('--min-duration', type=float, default=0.25, help='Minimum silence length (s)')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
def silence(input_file, threshold, min_duration, as_json):
    """List silent ranges."""
    from .core.cache import AnalysisCache

    cache = AnalysisCache()
    try:
        intervals = asyncio.run(cache.get_silence(input_file, threshold, min_duration))
    except VoxEditError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps([{"start": i.start, "end": i.end} for i in intervals]))
        return
    for i in intervals:
        click.echo(f"{i.start:8.3f}s - {i.end:8.3f}s ({i.duration:.3f}s)")
    click.echo(f"🔇 {len(intervals)} range(s), {sum(i.duration for i in intervals):.2f}s total")


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('start', type=float)
@click.argument('end', type=float)
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='Output file path (default: <name>_edited_<timestamp>)')
def trim(input_file, start, end, output):
    """Keep only START..END."""
    from .core.editor import AudioEditor

    result = asyncio.run(AudioEditor().trim(input_file, start, end))
    _finish(result, output)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('start', type=float)
@click.argument('end', type=float)
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='Output file path (default: <name>_edited_<timestamp>)')
def cut(input_file, start, end, output):
    """Remove START..END."""
    from .core.editor import AudioEditor

    result = asyncio.run(AudioEditor().cut(input_file, start, end))
    _finish(result, output)


@cli.command('remove-silence')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--threshold', type=float, default=-45.0, help='Silence threshold in dBFS')
@click.option('--min-duration', type=float, default=0.5, help='Minimum silence length (s)')
@click.option('--padding', type=float, default=0.05, help='Padding added around each cut (s)')
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='Output file path (default: <name>_edited_<timestamp>)')
def remove_silence(input_file, threshold, min_duration, padding, output):
    """Detect silence and remove all of it in one pass."""
    from .core.cache import AnalysisCache
    from .core.editor import AudioEditor

    async def run():
        intervals = await AnalysisCache().get_silence(input_file, threshold, min_duration)
        return await AudioEditor().remove_silence(input_file, intervals, padding)

    try:
        result = asyncio.run(run())
    except VoxEditError as e:
        raise click.ClickException(str(e))
    _finish(result, output)


@cli.command()
@click.option('-h', '--host', default='127.0.0.1', help='Host to bind')
@click.option('-p', '--port', default=8000, help='Port to bind')
def serve(host, port):
    """Start the REST API server."""
    try:
        import uvicorn
        from .api import app
    except ImportError:
        click.echo("❌ API dependencies not installed. Run: pip install voxedit[api]")
        sys.exit(1)
    click.echo(f"🚀 Starting API server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


def main():
    cli()


if __name__ == '__main__':
    main()
