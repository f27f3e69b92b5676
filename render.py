import os
import sys
import warnings
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser

from escapetime import (
    EscapePolicy,
    PALETTES,
    RasterImage,
    RenderParameters,
    colorize,
    palette_cycle,
    render_frame,
    render_pixels,
    write_gif,
)
from escapetime.color import COLORINGS
from escapetime.image import resolve_format
from escapetime.renderer import PRECISIONS


def select_device():
    """Use the first visible GPU when there is one, else the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # Memory growth can only be set before the GPUs are initialized.
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set with escape-time coloring.')

    parser.add_argument('--resolution', type=int,
                        dest='resolution', help='width and height of the square image in pixels',
                        metavar='N', default=512)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of escape tests per point (at least 2)',
                        metavar='MAX_ITERATIONS', default=100)

    parser.add_argument('--center-re', type=float,
                        dest='center_re', help='real part of the plane point at the image center offset',
                        metavar='CENTER_RE', default=0.0)

    parser.add_argument('--center-im', type=float,
                        dest='center_im', help='imaginary part of the plane point at the image center offset',
                        metavar='CENTER_IM', default=0.0)

    parser.add_argument('--scale', type=float,
                        dest='scale', help='factor applied to the default [-2, 2) window. Choose < 1 to zoom in',
                        metavar='SCALE', default=1.0)

    parser.add_argument('--palette-phase', type=float,
                        dest='palette_phase', help='offset added to the weight before the cosine palette wraps it',
                        metavar='PHASE', default=0.0)

    parser.add_argument('--policy', choices=[policy.value for policy in EscapePolicy],
                        default=EscapePolicy.ORBIT_TRAP.value,
                        help='How escapes become weights: binary membership, log of the step count, or orbit-trap smoothing.')

    parser.add_argument('--coloring', choices=COLORINGS, default='palette',
                        help='Map weights through the cosine palette, to gray levels, or through a matplotlib colormap.')

    parser.add_argument('--palette', choices=sorted(PALETTES), default='reference',
                        help='Cosine palette preset used by --coloring palette.')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap used by --coloring colormap (e.g. "viridis", "inferno")',
                        metavar='COLORMAP', default='twilight_shifted')

    parser.add_argument('--precision', choices=sorted(PRECISIONS), default='float32',
                        help='Floating point width used for the iteration.')

    parser.add_argument('--output', dest='output', type=str, default='mandelbrot.png',
                        help='Destination image file.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for the image. Can be any extension supported by Pillow. Default: the --output suffix.',
                        metavar='FORMAT', default=None)

    parser.add_argument('--reference', action='store_true',
                        help='Evaluate pixel by pixel instead of on the whole grid at once. Slow.')

    parser.add_argument('--cycle-frames', type=int, default=0, metavar='FRAMES',
                        help='Also write a GIF whose palette phase sweeps one period over FRAMES frames.')

    parser.add_argument('--gif', dest='gif', type=str, default='palette_cycle.gif',
                        help='Destination of the --cycle-frames animation.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def build_params(opt, parser):
    try:
        return RenderParameters(
            resolution=opt.resolution,
            max_iterations=opt.max_iterations,
            center=(opt.center_re, opt.center_im),
            scale=opt.scale,
            palette_phase=opt.palette_phase,
            policy=opt.policy,
            coloring=opt.coloring,
            palette=opt.palette,
            colormap=opt.colormap,
            precision=opt.precision,
        )
    except ValueError as exc:
        parser.error(str(exc))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    params = build_params(opt, parser)
    if opt.cycle_frames < 0:
        parser.error('--cycle-frames must not be negative.')
    if opt.cycle_frames and opt.reference:
        parser.error('--cycle-frames cannot be combined with --reference.')
    if opt.cycle_frames and params.coloring != 'palette':
        parser.error('--cycle-frames requires --coloring palette.')
    try:
        resolve_format(opt.output, opt.format)
    except ValueError as exc:
        parser.error(str(exc))

    log("TensorFlow version: %s" % tf.__version__)
    window = params.window
    log("Plane window: x [{0:.6g}, {1:.6g}], y [{2:.6g}, {3:.6g}]".format(
        window.x_min, window.x_max, window.y_min, window.y_max))

    if opt.reference:
        log("Evaluating {0} pixels one at a time".format(params.resolution ** 2))
        image = render_pixels(params, RasterImage(params.resolution, params.resolution))
    else:
        device = select_device()
        result = render_frame(params, device=device)
        log("{0} of {1} points escaped".format(int(result.escaped.sum()), result.escaped.size))
        if opt.cycle_frames:
            frames = []
            for i, frame in enumerate(palette_cycle(result, params, opt.cycle_frames)):
                print("frame {0} out of {1}".format(i, opt.cycle_frames), end='\r')
                frames.append(frame)
            gif_path = write_gif(Path(opt.gif), frames)
            log("Wrote %s" % gif_path)
        image = RasterImage.from_array(colorize(result, params))

    output_path = image.save(opt.output, opt.format)
    log("Wrote %s" % output_path)
    return output_path


if __name__ == '__main__':
    main()
