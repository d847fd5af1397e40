# compactify

A command-line tool that processes a whole folder of images in one run. It
can resize, crop, enlarge, convert, flip, make grayscale copies, make square
thumbnails, re-encode without loss and reduce images to a colour palette.
Files are worked on in parallel, and at the end a summary shows how many
images were processed and how much space was saved.

Only files directly inside the input directory whose names end in `.jpg`,
`.jpeg`, `.png` or `.webp` are processed. Subdirectories and other files are
left alone.

## Installation

```
pip install .
```

This installs the `compactify` command.

## Usage

Every processing command needs an input directory, given with `-i/--input`
(or through the configuration described below):

```
compactify resize -i ./images -w 800 -H 600
compactify crop -i ./images -w 800 -H 600 -g 5
compactify enlarge -i ./images -w 1200 -H 900
compactify convert -i ./images -f webp
compactify thumbnail -i ./images -w 150
compactify flip -i ./images
compactify grayscale -i ./images
compactify lossless -i ./images
compactify palette -i ./images
```

Commands and their aliases:

| Command | Aliases | What it does |
| --- | --- | --- |
| `resize` | `scale`, `rescale` | Resize to exactly `-w` by `-H` pixels |
| `crop` | `cut` | Scale to cover `-w` by `-H`, then cut out that area at the chosen gravity |
| `enlarge` | | Scale to exactly `-w` by `-H` pixels |
| `convert` | `conv` | Re-encode in the format given by `-f` (`jpeg`, `jpg`, `png`, `webp`) |
| `thumbnail` | `thumb`, `preview` | Square thumbnail `-w` pixels wide (50 to 1024) |
| `flip` | `invert`, `mirror` | Turn the image upside down |
| `grayscale` | `gray`, `bw` | Keep only shades of grey |
| `lossless` | `lc` | Re-encode in the same format with lossless or highest-quality settings |
| `palette` | | Reduce to a palette of at most 256 colours |
| `init` | `initialize`, `config` | Write a default `config.yaml` |

Crop gravity (`-g`) is 0 centre (the default), 1 north, 2 east, 3 south,
4 west or 5 smart; smart picks the candidate area with the most detail.
Widths and heights must be at least 1.

Options shared by the processing commands:

| Option | Meaning |
| --- | --- |
| `-i`, `--input` | Directory holding the images to process (required) |
| `-o`, `--output` | Directory for the processed images; created if missing |
| `-c`, `--concurrency` | Number of images processed at once (default: CPU count) |
| `--dry-run` | Read and process the images but create no directories and write no files |
| `--config` | Path to a configuration file |

Without `-o/--output`, results go to a new directory next to the input,
named after it with a suffix, for example `images-resized`, `images-flipped`,
`images-enlarged-1200x900`, `images-cropped_800x600` or
`images-converted.webp`. This directory must not exist yet. `convert` names
each output file after the original with the new extension; the other
commands keep the original file name.

A concurrency above twice the number of CPUs prints a warning. Files that
fail are listed under the summary; the other files are still processed.
Interrupting the run makes the remaining files be skipped.

`compactify --version` prints the version line. On an error the message is
printed to standard error and the exit status is 1.

## Configuration

```
compactify init
compactify init --force
```

`init` writes `config.yaml` in the current directory with the CPU count as
concurrency. It refuses to replace an existing file unless `--force` is given.

Settings are taken in this order:

1. command-line flags
2. environment variables prefixed with `COMPACTIFY_`, with dashes turned into
   underscores, for example `COMPACTIFY_CONCURRENCY=8` or `COMPACTIFY_DRY_RUN=true`
3. the configuration file: the one named by `--config`, otherwise the first
   of `./config.yaml`, `./config.yml`, `~/.config/compactify/config.yaml` and
   `~/.config/compactify/config.yml` that exists

A configuration file that cannot be read is reported and then ignored.

## Use from Python

The commands are also available as functions taking a
`compactify.operations.GlobalConfig`:

```python
from compactify.operations import GlobalConfig
from compactify.transform_commands import run_resize

result = run_resize(GlobalConfig(input_dir="./images", concurrency=4), 800, 600)
if result is not None:
    print(result.processed_images, result.saved_bytes)
```

`compactify.transform_commands` holds `run_convert`, `run_crop`,
`run_enlarge`, `run_resize` and `run_thumbnail`; `compactify.effect_commands`
holds `run_flip`, `run_grayscale`, `run_lossless` and `run_palette`. Each
returns a `compactify.utils.Result`, or `None` when the input directory holds
no images, and raises a `compactify.validation.ValidationError` for invalid
arguments.

Single images can be handled with `compactify.imaging.ImageProcessor`, which
takes encoded image bytes and returns new encoded bytes from each operation.