# dataplotter

The computing core of a serial data plotter, as a plain Python library with no
third-party dependencies. It does the numerical work on channel data. It does
not draw anything.

## What is inside

- `dataplotter.channels`: channel numbering constants and helpers
  (`fft_index`, `is_fft_index`, `is_logic_index`, `interpolation_chid`,
  `is_analog_or_math`, `logic_group_of`, `logic_group_bit`,
  `math_channel_id`). It also defines the `Sample` data point (`key`,
  `value`) and the `FFTType`, `FFTWindow` and `MathOperation` enums.
- `dataplotter.signalprocessing`: `SignalProcessor.fft_plot` computes a
  spectrum, a periodogram or a Welch periodogram (in dB) as a list of
  `Sample`s. `SignalProcessor.calculate_spectrum` windows and zero-pads the
  data, then transforms it. `SignalProcessor.process` measures a signal and
  returns `Measurements`, with the fields `period`, `frequency`, `amplitude`,
  `minimum`, `maximum`, `vrms`, `dc`, `sample_rate`, `rise`, `fall` and
  `samples`. The module also has `fft` (radix-2, power-of-two length),
  `next_pow2`, `strongest_frequency` and `rise_fall`.
- `dataplotter.xymode`: `calculate_xy` pairs two channels into a list of
  `CurvePoint`s, with optional DC removal. Channels of different lengths are
  first cut to the time range they share.
- `dataplotter.averager`: `Averager` keeps a running average for each analog
  channel.
  - `new_data_vector` averages whole vectors.
  - `new_data_point` averages single points and returns an `AveragedPoint`.
  - `set_count` and `reset` control how many items are averaged.
- `dataplotter.plotmath`: `PlotMath` combines two channels, or a channel and a
  constant, with add, subtract, multiply or divide.
  - Both inputs can be scaled.
  - The result comes back as a `MathResult`.
  - Inputs of different lengths raise `MathError`.
- `dataplotter.interpolator`: `Interpolator` upsamples a channel by inserting
  zeros and low-pass filtering the result with FIR coefficients.
  - The coefficients come from `set_filter`, or from a comma-separated file
    read by `load_filter_from_file`.
  - `interpolate` returns an `InterpolationResult`.
  - `fir_filter` is the convolution it uses.
- `dataplotter.updatechecker`: `parse_version` and `evaluate_release` compare
  the `tag_name` of a release description with the running version.
  `UpdateChecker.check_for_updates` fetches that description as JSON from the
  URL you give it. Both return a `VersionCheck`, or nothing.
- `dataplotter.expressions`: a small arithmetic `Engine` that supports
  variables and `Math.*` functions. The module also has
  `replace_unit_prefixes` and `replace_function_names`.
  - `SimpleExpressionParser` evaluates short inputs with SI prefixes, such as
    `1,5k` or `/2`.
  - `VariableExpression` checks an expression once and then evaluates it
    repeatedly.
  - Invalid expressions raise `ExpressionError`.
- `dataplotter.manual_input`: generators of data-protocol frames for testing
  without a device.
  - `RollingGenerator` produces `$$P` point frames.
  - `OscilloscopeGenerator` produces `$$C` float32 channel frames.
  - Both take their per-channel expressions from an `ExpressionTable`.
  - `logic_test_frame` and `clear_all_frame` build fixed frames.

## Install

```
pip install .
```

## Example

```python
import math

from dataplotter.channels import Sample
from dataplotter.signalprocessing import SignalProcessor

fs = 1000.0
data = [Sample(i / fs, math.sin(2 * math.pi * 50 * i / fs)) for i in range(1000)]
m = SignalProcessor().process(data)
print(m.frequency, m.vrms)
```

## What it does not do

This package has no graphical interface and no plotting. It does not read from
serial ports and does not parse incoming data frames. It has no command-line
program. It computes results and returns them, and the caller decides how to
display or send them.

## Running the tests

```
pip install .[test]
pytest
```