# gazekeys

gazekeys works through close-up images of one eye, frame by frame, and turns
blinks and gaze shifts into arrow-key commands.

- A **double blink** switches command mode on or off. A blink is counted when
  the eye aspect ratio stays below 0.25 for three frames in a row. Two blinks
  100–800 ms apart, within the last five seconds, make a double blink.
- The first frame in command mode records the pupil position as a baseline.
  After that, a gaze offset larger than 0.3 (normalised to half the eye
  image's size) picks the arrow for its strongest component: left, right, up
  or down. Command mode lapses five seconds after it was switched on.

All image processing is done with NumPy, SciPy and Pillow
(`gazekeys.vision`). It covers grayscale conversion, Gaussian blur, Otsu and
adaptive mean thresholding, outer-contour tracing, contour area and centroid,
and a gradient-voting Hough circle search for the pupil.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
gazekeys FRAMES_DIR [--config FILE] [--output DIR]
```

`FRAMES_DIR` is a directory of image files (`.png`, `.jpg`, `.jpeg`, `.bmp`,
`.tif`, `.tiff`, `.ppm`, `.pgm`), one per frame. The files are read in name
order, so number them in sequence, for example `frame_0001.png`.

- `--config FILE` sets the configuration file to check. By default this is
  `~/.eyetracker/config.xml`, or `%LOCALAPPDATA%\EyeTracker\config.xml` on
  Windows. If the file cannot be opened, a warning is printed and the run
  goes on.
- `--output DIR` writes every frame, annotated, as `frame_000000.png`,
  `frame_000001.png` and so on. The annotations are the pupil position, the
  gaze arrow, the mode (`MONITORING` or `COMMAND ACTIVE`) and the frame rate.

Events are printed as they happen: a double blink, command mode turning on
and off, baseline calibration, and each arrow direction (for example
`→ Right`). The run ends when the frames run out, when a frame is empty, or
on Ctrl+C.

## Library use

```python
from gazekeys.cli import read_frames
from gazekeys.tracker import EyeTracker

tracker = EyeTracker()
for result in tracker.run(read_frames("recording/")):
    print(result.pupil, result.gaze, result.command_mode_active)
```

`EyeTracker.run` is a generator, and it yields a `FrameResult` for each
frame. A `FrameResult` holds the annotated BGR `frame`, the `pupil` and
`gaze` points, and `command_mode_active`. `EyeTracker.process_frame` handles
a single frame, and `EyeTracker.stop` ends a run.

The parts can also be used on their own:

- `gazekeys.blink.BlinkDetector` has three methods. `calculate_ear` gives the
  eye aspect ratio of a frame. `detect_blink` returns `True` on the frame
  where a blink is recognised. `check_double_blink_pattern` reports a double
  blink. The `eye_aspect_ratio` function computes the ratio from a contour.
- `gazekeys.gaze.GazeEstimator` has three methods. `detect_pupil_center`
  returns the pupil, or `Point(-1, -1)` if none is found. `calibrate_baseline`
  records the neutral position. `calculate_gaze_direction` returns the
  normalised offset, which is zero inside the dead zone.
- `gazekeys.commands.CommandController` takes an optional `key_sender`. This
  is a callable that receives a `Direction` for every command.
  `dominant_direction` maps a gaze vector to a `Direction`.
- `gazekeys.utils` gives the configuration and data paths (`get_config_path`,
  `get_data_path`) and `load_config`. `save_calibration_data` and
  `load_calibration_data` store and read a baseline, in XML, YAML or JSON
  depending on the file suffix. It also has `draw_debug_info` and
  `FpsCounter`.

`BlinkDetector`, `CommandController` and `FpsCounter` accept a `clock`
callable, so timing-dependent behaviour can be reproduced exactly.

## What it does not do

- **No key injection.** gazekeys does not press keys in the operating system.
  Each arrow command is logged and passed to the `key_sender` you give
  `CommandController`. The `gazekeys` command uses no sender, so it only
  prints the directions.
- **No live camera or display window.** Frames come from a directory of
  images, or from any iterable of arrays you pass to `EyeTracker.run`.
  Annotated frames are written to disk with `--output` rather than shown on
  screen.
- **No settings from the configuration file.** `load_config` only checks that
  the file can be opened. The thresholds are not read from it and stay at
  their defaults.