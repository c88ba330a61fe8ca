# cgppm.py

# Copyright (c) 2016-2026, cgppm developers
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""Convert Netpbm files to 8-bit or 16-bit PNG, JPEG, BMP, and TIFF images.

Cgppm is a Python library and command line tool to read image files in the
Netpbm formats and convert them to bitmaps of fixed depth:

- PBM (Portable Bit Map): P1 (text) and P4 (binary)
- PGM (Portable Gray Map): P2 (text) and P5 (binary)
- PPM (Portable Pixel Map): P3 (text) and P6 (binary)

The Netpbm formats are specified at http://netpbm.sourceforge.net/doc/.

Samples are rescaled from the maximum value declared in the file to 255
(8-bit) or 65535 (16-bit), rounding half away from zero. Bitmap samples are
inverted such that black pixels map to 0.
No gamma correction, color management, or dithering is performed.

:Author: cgppm developers
:License: BSD 3-Clause
:Version: 2026.10.19

Quickstart
----------

Install the cgppm package and all dependencies from the
`Python Package Index <https://pypi.org/>`_::

    python -m pip install -U cgppm[all]

See `Examples`_ for using the programming interface.

Requirements
------------

This release has been tested with the following requirements and dependencies
(other versions may work):

- `CPython 3.9, 3.10, 3.11, 3.12 <https://www.python.org>`_
- `NumPy <https://pypi.org/project/numpy/>`_
- `Pillow <https://pypi.org/project/pillow/>`_
- `Tifffile <https://pypi.org/project/tifffile/>`_ (optional, TIFF output)
- `Matplotlib <https://pypi.org/project/matplotlib/>`_ (optional, display)

Revisions
---------

2026.10.19

- Rewrite parser with byte offsets in error messages (breaking).
- Raise FormatError and ConversionError instead of generic exceptions.
- Fix 16-bit conversion writing 8-bit images.
- Convert files concurrently.
- Save TIFF files via tifffile.
- Only delete source files that were converted successfully.

Examples
--------

Parse a Netpbm file from bytes:

>>> image = RawImage.frombytes(b'P2\\n2 2\\n255\\n0 128 255 64\\n')
>>> image.magicnumber, image.shape, image.maxval
('P2', (2, 2), 255)
>>> image.samples.tolist()
[0, 128, 255, 64]

Convert the samples to 16-bit:

>>> converted = convert(image, 65535)
>>> converted.bitdepth
16
>>> converted.data.tolist()
[[0, 32896], [65535, 16448]]

Bitmap samples are inverted:

>>> convert(RawImage.frombytes(b'P1\\n2 1\\n1 0\\n'), 255).data.tolist()
[[0, 255]]

Convert files from the command line::

    $ python -m cgppm -16 -save:png -save:tiff -target:out image.ppm

"""

from __future__ import annotations

__version__ = '2026.10.19'

__all__ = [
    'imread',
    'imwrite',
    'convert',
    'convert_file',
    'convert_files',
    'output_paths',
    'delete_sources',
    'show_images',
    'parse_args',
    'read_magicnumber',
    'read_header',
    'read_samples',
    'RawImage',
    'ConvertedImage',
    'Image',
    'Result',
    'Settings',
    'NetpbmFormat',
    'FormatError',
    'FormatErrorReason',
    'ConversionError',
    'ConversionErrorReason',
    'FORMATS',
    'BITDEPTHS',
]

import sys
import os
import re
import enum
import logging
import warnings
from concurrent.futures import Future, ThreadPoolExecutor
from typing import NamedTuple

import numpy
import PIL.Image

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any, BinaryIO, Iterable, Literal, Sequence, Union

    from numpy.typing import ArrayLike

    PathLike = Union[str, os.PathLike]
    MagicNumber = Union[
        Literal['P1'],
        Literal['P2'],
        Literal['P3'],
        Literal['P4'],
        Literal['P5'],
        Literal['P6'],
    ]
    Encoding = Union[Literal['ascii'], Literal['binary']]


class NetpbmFormat(NamedTuple):
    """Variant of Netpbm format identified by magic number."""

    magicnumber: MagicNumber
    encoding: Encoding
    depth: int
    hasmaxval: bool

    @property
    def bilevel(self) -> bool:
        """Format stores black and white pixels."""
        return not self.hasmaxval


FORMATS: dict[str, NetpbmFormat] = {
    'P1': NetpbmFormat('P1', 'ascii', 1, False),
    'P2': NetpbmFormat('P2', 'ascii', 1, True),
    'P3': NetpbmFormat('P3', 'ascii', 3, True),
    'P4': NetpbmFormat('P4', 'binary', 1, False),
    'P5': NetpbmFormat('P5', 'binary', 1, True),
    'P6': NetpbmFormat('P6', 'binary', 3, True),
}
"""Netpbm format variants by magic number."""

BITDEPTHS: dict[int, int] = {8: 255, 16: 65535}
"""Maximum sample value of converted images by bit depth."""

FILE_FORMATS: dict[str, str] = {
    'png': 'png',
    'jpg': 'jpg',
    'jpeg': 'jpg',
    'bmp': 'bmp',
    'tif': 'tif',
    'tiff': 'tif',
}
"""Output file formats by name or file extension."""

PIL_FORMATS: dict[str, str] = {'png': 'PNG', 'jpg': 'JPEG', 'bmp': 'BMP'}

INT_MAX = 2**31 - 1
WHITESPACE = b' \t\r\n'

# separators between tokens: runs of whitespace and comments
_SEPARATOR = re.compile(rb'(?:[ \t\r\n]+|#[^\r\n]*)*')
_DIGITS = re.compile(rb'[0-9]*')
_ASCII_SAMPLE = re.compile(rb'([0-9]+)|[ \t\r\n]+|#[^\r\n]*|(.)', re.DOTALL)
# P1 pixels are single characters and may be written without separators
_ASCII_BIT = re.compile(rb'([0-9])|[ \t\r\n]+|#[^\r\n]*|(.)', re.DOTALL)


class FormatErrorReason(enum.Enum):
    """Reason of failure to parse Netpbm file."""

    UNRECOGNIZED_MAGIC = 'unrecognized magic number'
    MALFORMED_HEADER = 'malformed header'
    INVALID_MAXVAL = 'invalid maxval'
    SAMPLE_OUT_OF_RANGE = 'sample out of range'
    MALFORMED_BODY = 'malformed image data'
    TRUNCATED_BODY = 'truncated image data'


class FormatError(ValueError):
    """Malformed Netpbm file.

    Parameters:
        reason:
            Kind of format violation.
        message:
            Description of violation.
        offset:
            Position in file where the violation was detected.
        filename:
            Name of file.

    """

    reason: FormatErrorReason
    message: str
    offset: int | None
    filename: str

    def __init__(
        self,
        reason: FormatErrorReason,
        message: str,
        /,
        *,
        offset: int | None = None,
        filename: str = '',
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.offset = offset
        self.filename = filename

    def __str__(self) -> str:
        msg = f'{self.reason.value}: {self.message}'
        if self.offset is not None:
            msg += f' at byte {self.offset}'
        if self.filename:
            msg = f'{self.filename}: {msg}'
        return msg


class ConversionErrorReason(enum.Enum):
    """Reason of failure to convert image."""

    DIVISION_BY_ZERO = 'division by zero'


class ConversionError(ArithmeticError):
    """Image can not be converted."""

    reason: ConversionErrorReason

    def __init__(self, reason: ConversionErrorReason, message: str, /):
        super().__init__(f'{reason.value}: {message}')
        self.reason = reason


def imread(
    file: PathLike | BinaryIO, /, *, bitdepth: int | None = None
) -> numpy.ndarray:
    """Return image data from Netpbm file.

    Parameters:
        file:
            Name of file or open binary file to read.
        bitdepth:
            Convert samples to 8 or 16 bit.
            By default, the samples are returned as stored in the file.

    """
    image = RawImage.fromfile(file)
    if bitdepth is None:
        return image.asarray()
    if bitdepth not in BITDEPTHS:
        raise ValueError(f'invalid bitdepth {bitdepth!r}')
    return numpy.copy(convert(image, BITDEPTHS[bitdepth]).data)


def imwrite(
    file: PathLike | BinaryIO,
    image: ConvertedImage,
    /,
    *,
    format: str | None = None,
) -> None:
    """Write converted image to PNG, JPEG, BMP, or TIFF file.

    Parameters:
        file:
            Name of file or open binary file to write.
        image:
            Converted image to write.
        format:
            File format: 'png', 'jpg', 'bmp', or 'tif'.
            By default, the format is determined from the file extension.
            JPEG and BMP files are limited to 8-bit.
            16-bit RGB images can only be written to TIFF.

    """
    if format is None:
        if not isinstance(file, (str, os.PathLike)):
            raise ValueError('format required to write to open file')
        format = os.path.splitext(os.fspath(file))[-1][1:]
    fileformat = FILE_FORMATS.get(format.lower())
    if fileformat is None:
        raise ValueError(f'file format {format!r} not supported')

    if fileformat == 'tif':
        import tifffile

        tifffile.imwrite(
            file,
            image.data,
            photometric='rgb' if image.depth == 3 else 'minisblack',
        )
        return

    if image.bitdepth == 16 and (image.depth != 1 or fileformat != 'png'):
        kind = 'RGB' if image.depth == 3 else 'grayscale'
        raise ValueError(
            f'writing 16-bit {kind} images to {fileformat!r} not supported'
        )
    # uint8 maps to mode L or RGB, uint16 to I;16
    pil = PIL.Image.fromarray(numpy.array(image.data))
    pil.save(file, format=PIL_FORMATS[fileformat])


def convert(image: RawImage, /, maxval: int = 255) -> ConvertedImage:
    """Return image with samples rescaled to fixed maximum value.

    Each sample ``s`` is mapped to ``round(s * maxval / image.maxval)``,
    rounding half away from zero. Bitmap samples are inverted first,
    such that black (1) maps to 0 and white (0) maps to `maxval`.

    Parameters:
        image:
            Image to convert. Not modified.
        maxval:
            Maximum sample value of converted image: 255 or 65535.

    Raises:
        ConversionError: Maximum sample value of image is zero.

    """
    if maxval not in (255, 65535):
        raise ValueError(f'invalid maxval {maxval!r}')
    if image.maxval == 0:
        raise ConversionError(
            ConversionErrorReason.DIVISION_BY_ZERO,
            'maxval of image is zero',
        )
    samples = image.samples.astype(numpy.uint64)
    if image.bilevel:
        samples = 1 - samples
    # exact integer rounding: (2 * s * T + M) // (2 * M)
    scaled = (samples * (2 * maxval) + image.maxval) // (2 * image.maxval)
    numpy.clip(scaled, 0, maxval, out=scaled)
    data = scaled.astype('u1' if maxval == 255 else 'u2').reshape(image.shape)
    return ConvertedImage(data, maxval=maxval)


def read_magicnumber(data: bytes, /) -> tuple[NetpbmFormat, int]:
    """Return Netpbm format variant and offset after magic number.

    Raises:
        FormatError: Magic number is not one of P1 to P6 or not followed by
            whitespace.

    """
    if data[:1] != b'P':
        raise FormatError(
            FormatErrorReason.UNRECOGNIZED_MAGIC,
            f'not a Netpbm file {data[:16]!r}',
            offset=0,
        )
    magicnumber = data[:2].decode('latin-1')
    fmt = FORMATS.get(magicnumber)
    if fmt is None:
        raise FormatError(
            FormatErrorReason.UNRECOGNIZED_MAGIC,
            f'magic number {magicnumber!r} not supported',
            offset=1,
        )
    nextbyte = data[2:3]
    if not nextbyte or nextbyte not in WHITESPACE:
        raise FormatError(
            FormatErrorReason.MALFORMED_HEADER,
            f'expected whitespace after magic number, found {nextbyte!r}',
            offset=2,
        )
    return fmt, 2


def read_header(
    data: bytes, offset: int, fmt: NetpbmFormat, /
) -> tuple[int, int, int, int]:
    """Return width, height, maxval, and offset of image data.

    Parameters:
        data:
            Content of Netpbm file.
        offset:
            Position after magic number.
        fmt:
            Netpbm format variant.

    Raises:
        FormatError: Header is malformed or maxval out of range.

    """
    names = ['width', 'height']
    if fmt.hasmaxval:
        names.append('maxval')
    values = []
    start = offset
    for i, name in enumerate(names):
        value, start, offset = _read_integer(data, offset, name)
        nextbyte = data[offset : offset + 1]
        if i == len(names) - 1:
            # in disagreement with the netpbm doc pages, the netpbm man pages
            # only allow a single whitespace character after the last value
            if not nextbyte or nextbyte not in WHITESPACE:
                raise FormatError(
                    FormatErrorReason.MALFORMED_HEADER,
                    f'expected single whitespace after {name}, '
                    f'found {nextbyte!r}',
                    offset=offset,
                )
            offset += 1
        elif nextbyte and nextbyte not in WHITESPACE + b'#':
            raise FormatError(
                FormatErrorReason.MALFORMED_HEADER,
                f'unexpected {nextbyte!r} after {name}',
                offset=offset,
            )
        values.append(value)

    width, height = values[:2]
    maxval = values[2] if fmt.hasmaxval else 1
    if fmt.hasmaxval and not 1 <= maxval <= 65535:
        raise FormatError(
            FormatErrorReason.INVALID_MAXVAL,
            f'maxval {maxval} out of range 1 to 65535',
            offset=start,
        )
    return width, height, maxval, offset


def read_samples(
    data: bytes,
    offset: int,
    fmt: NetpbmFormat,
    width: int,
    height: int,
    maxval: int,
    /,
) -> numpy.ndarray:
    """Return flat array of samples from image data.

    Samples are ordered by row, column, and channel.
    The data type is uint8 if maxval < 256, else uint16.
    Bytes following the image data are ignored.

    Raises:
        FormatError: Image data is truncated, malformed, or samples exceed
            maxval.

    """
    count = width * height * fmt.depth
    dtype = numpy.dtype('u1' if maxval < 256 else 'u2')
    if fmt.encoding == 'ascii':
        return _read_ascii_samples(data, offset, fmt, count, maxval, dtype)

    if fmt.bilevel:
        rowsize = (width + 7) // 8
        size = rowsize * height
    else:
        itemsize = 1 if maxval < 256 else 2
        size = count * itemsize
    rawdata = data[offset : offset + size]
    if len(rawdata) < size:
        raise FormatError(
            FormatErrorReason.TRUNCATED_BODY,
            f'expected {size} bytes of image data, found {len(rawdata)}',
            offset=len(data),
        )
    if fmt.bilevel:
        packed = numpy.frombuffer(rawdata, 'u1').reshape(height, rowsize)
        # trailing bits of each row are padding
        unpacked = numpy.unpackbits(packed, axis=-1)[:, :width]
        return unpacked.reshape(-1).astype(dtype)

    samples = numpy.frombuffer(rawdata, 'u1' if itemsize == 1 else '>u2')
    samples = samples.astype(dtype)
    outside = numpy.flatnonzero(samples > maxval)
    if outside.size > 0:
        index = int(outside[0])
        raise FormatError(
            FormatErrorReason.SAMPLE_OUT_OF_RANGE,
            f'sample {samples[index]} exceeds maxval {maxval}',
            offset=offset + index * itemsize,
        )
    return samples


class RawImage:
    """Depth-agnostic raster read from Netpbm file.

    Instances are immutable.

    Parameters:
        samples:
            Sample values ordered by row, column, and channel.
            Copied to a read-only array.
        width:
            Number of columns in image.
        height:
            Number of rows in image.
        depth:
            Number of samples per pixel, 1 or 3.
        maxval:
            Maximum value of image samples.
        magicnumber:
            ID determining Netpbm format.
            By default, 'P6' if depth is 3 else 'P5'.

    """

    magicnumber: MagicNumber
    """ID determining Netpbm format."""

    width: int
    """Number of columns in image."""

    height: int
    """Number of rows in image."""

    depth: int
    """Number of samples per pixel."""

    maxval: int
    """Maximum value of image samples. Always 1 for bitmaps."""

    samples: numpy.ndarray
    """Flat, read-only array of samples."""

    filename: str
    """Name of file image was read from."""

    header: str
    """Netpbm header starting with magicnumber."""

    dataoffset: int
    """Position of image data in file."""

    def __init__(
        self,
        samples: ArrayLike,
        /,
        width: int,
        height: int,
        *,
        depth: int = 1,
        maxval: int = 255,
        magicnumber: MagicNumber | None = None,
        filename: str = '',
        header: str = '',
        dataoffset: int = 0,
    ) -> None:
        if magicnumber is None:
            magicnumber = 'P6' if depth == 3 else 'P5'
        fmt = FORMATS.get(magicnumber)
        if fmt is None:
            raise ValueError(f'invalid magicnumber {magicnumber!r}')
        if depth != fmt.depth:
            raise ValueError(
                f'invalid depth {depth} for magicnumber {magicnumber!r}'
            )
        if width < 1 or height < 1:
            raise ValueError(f'invalid shape {(height, width)}')
        if fmt.bilevel and maxval != 1:
            raise ValueError(f'invalid maxval {maxval} for bitmap')
        if not 0 <= maxval <= 65535:
            raise ValueError(f'maxval {maxval} out of range')

        data = numpy.asarray(samples)
        if data.dtype.kind not in 'uib':
            raise ValueError(f'dtype {data.dtype!r} not supported')
        if data.size != width * height * depth:
            raise ValueError(
                f'{data.size} samples do not match '
                f'shape {(height, width, depth)}'
            )
        if data.size > 0 and (data.min() < 0 or data.max() > maxval):
            raise ValueError(f'samples out of range 0 to {maxval}')
        data = data.reshape(-1).astype('u1' if maxval < 256 else 'u2')
        data.setflags(write=False)

        setattr_ = super().__setattr__
        setattr_('magicnumber', magicnumber)
        setattr_('width', int(width))
        setattr_('height', int(height))
        setattr_('depth', int(depth))
        setattr_('maxval', int(maxval))
        setattr_('samples', data)
        setattr_('filename', filename)
        setattr_('header', header)
        setattr_('dataoffset', dataoffset)

    @classmethod
    def fromfile(cls, file: PathLike | BinaryIO, /) -> RawImage:
        """Return image read from Netpbm file.

        Parameters:
            file:
                Name of file or open binary file to read.

        Raises:
            FormatError: File is not a valid Netpbm file.

        """
        if isinstance(file, (str, os.PathLike)):
            filename = os.fspath(file)
            with open(file, 'rb') as fh:
                data = fh.read()
        else:
            filename = ''
            data = file.read()
        try:
            return cls.frombytes(data, filename=filename)
        except FormatError as exc:
            exc.filename = filename
            raise

    @classmethod
    def frombytes(cls, data: bytes, /, *, filename: str = '') -> RawImage:
        """Return image parsed from content of Netpbm file."""
        fmt, offset = read_magicnumber(data)
        width, height, maxval, dataoffset = read_header(data, offset, fmt)
        samples = read_samples(data, dataoffset, fmt, width, height, maxval)
        return cls(
            samples,
            width,
            height,
            depth=fmt.depth,
            maxval=maxval,
            magicnumber=fmt.magicnumber,
            filename=filename,
            header=data[:dataoffset].decode(errors='ignore'),
            dataoffset=dataoffset,
        )

    def asarray(self) -> numpy.ndarray:
        """Return copy of samples in image shape."""
        return self.samples.reshape(self.shape).copy()

    @property
    def format(self) -> NetpbmFormat:
        """Netpbm format variant."""
        return FORMATS[self.magicnumber]

    @property
    def bilevel(self) -> bool:
        """Image is a black and white bitmap."""
        return self.format.bilevel

    @property
    def shape(self) -> tuple[int, ...]:
        """Shape of image array."""
        if self.depth > 1:
            return (self.height, self.width, self.depth)
        return (self.height, self.width)

    @property
    def axes(self) -> str:
        """Axes of image array."""
        return 'YXS' if self.depth > 1 else 'YX'

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f'{self.__class__.__name__!r} is immutable')

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f'{self.__class__.__name__!r} is immutable')

    def __repr__(self) -> str:
        if self.filename:
            arg = f'{os.path.split(os.path.normcase(self.filename))[-1]!r}'
        else:
            arg = ''
        return f'<{self.__class__.__name__}({arg})>'

    def __str__(self) -> str:
        return indent(
            repr(self),
            f'magicnumber: {self.magicnumber}',
            f'axes: {self.axes}',
            f'shape: {self.shape}',
            f'dtype: {self.samples.dtype}',
            f'maxval: {self.maxval}',
        )


class ConvertedImage:
    """Image with samples of fixed bit depth.

    Parameters:
        data:
            Image array of shape (height, width) or (height, width, 3),
            dtype uint8 or uint16. Copied to a read-only array.
        maxval:
            Maximum sample value, 255 or 65535.

    """

    data: numpy.ndarray
    """Read-only image array."""

    maxval: int
    """Maximum sample value."""

    def __init__(self, data: numpy.ndarray, /, *, maxval: int) -> None:
        dtype = {255: numpy.uint8, 65535: numpy.uint16}.get(maxval)
        if dtype is None:
            raise ValueError(f'invalid maxval {maxval!r}')
        if data.dtype != dtype:
            raise ValueError(f'invalid dtype {data.dtype!r} for {maxval=}')
        if data.ndim != 2 and not (data.ndim == 3 and data.shape[-1] == 3):
            raise ValueError(f'invalid shape {data.shape}')
        data = numpy.array(data, copy=True)
        data.setflags(write=False)
        self.data = data
        self.maxval = maxval

    @property
    def height(self) -> int:
        """Number of rows in image."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Number of columns in image."""
        return int(self.data.shape[1])

    @property
    def depth(self) -> int:
        """Number of samples per pixel."""
        return 3 if self.data.ndim == 3 else 1

    @property
    def bitdepth(self) -> int:
        """Number of bits per sample, 8 or 16."""
        return 8 if self.maxval == 255 else 16

    @property
    def shape(self) -> tuple[int, ...]:
        """Shape of image array."""
        return tuple(self.data.shape)

    def tobytes(self) -> bytes:
        """Return interleaved samples, 16-bit samples big-endian."""
        if self.bitdepth == 16:
            return self.data.astype('>u2').tobytes()
        return self.data.tobytes()

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__}'
            f'({self.width}x{self.height}x{self.depth}, '
            f'{self.bitdepth}-bit)>'
        )


class Image:
    """Converted image with name and directory to save to.

    Parameters:
        name:
            File name without extension.
        directory:
            Default directory to save to.
        converted:
            Converted image.

    """

    name: str
    directory: str
    converted: ConvertedImage

    def __init__(
        self, name: str, directory: str, converted: ConvertedImage, /
    ) -> None:
        self.name = name
        self.directory = directory
        self.converted = converted

    def filepath(self, format: str, /, directory: str | None = None) -> str:
        """Return path of file to save image to."""
        if directory is None:
            directory = self.directory
        return os.path.join(directory, f'{self.name}.{format}')

    def save(self, format: str, /, directory: str | None = None) -> str:
        """Save image to directory and return file path.

        Parameters:
            format:
                File format: 'png', 'jpg', 'bmp', or 'tif'.
            directory:
                Directory to save to. Created if necessary.
                By default, the image's directory.

        """
        filepath = self.filepath(format, directory)
        if directory:
            os.makedirs(directory, exist_ok=True)
        imwrite(filepath, self.converted, format=format)
        log_debug('saved %s', filepath)
        return filepath

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self.name!r})>'


class Settings:
    """Options of the command line interface.

    The parser and converter do not depend on these settings.

    """

    bitdepths: tuple[int, ...]
    """Bit depths to convert to."""

    formats: tuple[str, ...]
    """File formats to save converted images as."""

    targetdir: str | None
    """Directory to save to. By default, the directory of the source."""

    deletesource: bool
    """Delete source files that were converted successfully."""

    showui: bool
    """Display converted images."""

    workers: int | None
    """Maximum number of files converted concurrently."""

    verbose: bool
    """Log debug messages."""

    help: bool
    """Print usage and exit."""

    def __init__(
        self,
        *,
        bitdepths: Sequence[int] = (8,),
        formats: Sequence[str] = ('png',),
        targetdir: str | None = None,
        deletesource: bool = False,
        showui: bool = False,
        workers: int | None = None,
        verbose: bool = False,
        help: bool = False,
    ) -> None:
        for bitdepth in bitdepths:
            if bitdepth not in BITDEPTHS:
                raise ValueError(f'invalid bitdepth {bitdepth!r}')
        fileformats = []
        for format in formats:
            fileformat = FILE_FORMATS.get(format.lower())
            if fileformat is None:
                raise ValueError(f'file format {format!r} not supported')
            if fileformat not in fileformats:
                fileformats.append(fileformat)
        if workers is not None and workers < 1:
            raise ValueError(f'invalid number of workers {workers!r}')
        self.bitdepths = tuple(sorted(set(bitdepths)))
        self.formats = tuple(fileformats)
        self.targetdir = targetdir
        self.deletesource = bool(deletesource)
        self.showui = bool(showui)
        self.workers = workers
        self.verbose = bool(verbose)
        self.help = bool(help)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}>'

    def __str__(self) -> str:
        return indent(
            repr(self),
            f'bitdepths: {self.bitdepths}',
            f'formats: {self.formats}',
            f'targetdir: {self.targetdir}',
            f'deletesource: {self.deletesource}',
            f'showui: {self.showui}',
            f'workers: {self.workers}',
        )


class Result:
    """Outcome of converting one file.

    On failure, `images` is empty, and `stage` and `error` describe the
    failure.

    """

    filename: str
    images: list[Image]
    stage: str | None
    error: Exception | None

    def __init__(
        self,
        filename: str,
        images: list[Image] | None = None,
        /,
        *,
        stage: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.filename = filename
        self.images = [] if images is None else images
        self.stage = stage
        self.error = error

    @property
    def ok(self) -> bool:
        """File was converted successfully."""
        return self.error is None

    def __repr__(self) -> str:
        arg = os.path.split(self.filename)[-1]
        status = 'ok' if self.ok else f'{self.stage} failed'
        return f'<{self.__class__.__name__}({arg!r}, {status})>'


def convert_file(filename: str, settings: Settings, /) -> Result:
    """Read, convert, and save one Netpbm file.

    Errors are logged and returned in the result, not raised.

    """
    stage = 'read'
    try:
        raw = RawImage.fromfile(filename)
        log_debug('read %s %s %s', filename, raw.magicnumber, raw.shape)
        stage = 'convert'
        images = []
        for bitdepth in settings.bitdepths:
            directory, name = output_name(filename, bitdepth)
            converted = convert(raw, BITDEPTHS[bitdepth])
            images.append(Image(name, directory, converted))
        stage = 'save'
        for image in images:
            for format in settings.formats:
                image.save(format, settings.targetdir)
    except Exception as exc:
        # failures of one file must not abort the batch
        log_error('%s failed: %s', stage, exc)
        return Result(filename, stage=stage, error=exc)
    return Result(filename, images)


def convert_files(
    files: Iterable[str], settings: Settings, /
) -> list[Result]:
    """Convert Netpbm files concurrently.

    One task is run per file. Failures do not abort other files.
    A file whose output paths are already claimed by a preceding file,
    for example 'a.pgm' and 'a.ppm', fails at the 'save' stage without
    being converted.

    Returns:
        Results in the order of `files`.

    """
    claimed: dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=settings.workers) as executor:
        tasks: list[Result | Future[Result]] = []
        for filename in files:
            paths = output_paths(filename, settings)
            duplicates = [path for path in paths if path in claimed]
            if duplicates:
                error = ValueError(
                    f'output file {duplicates[0]!r} is also written '
                    f'by {claimed[duplicates[0]]!r}'
                )
                log_error('save failed: %s', error)
                tasks.append(Result(filename, stage='save', error=error))
                continue
            claimed.update((path, filename) for path in paths)
            tasks.append(executor.submit(convert_file, filename, settings))
        return [
            task if isinstance(task, Result) else task.result()
            for task in tasks
        ]


def output_name(filename: str, bitdepth: int, /) -> tuple[str, str]:
    """Return source directory and name of converted image."""
    directory, name = os.path.split(os.path.abspath(filename))
    return directory, f'{os.path.splitext(name)[0]}-{bitdepth}bit'


def output_paths(filename: str, settings: Settings, /) -> list[str]:
    """Return normalized paths of files written for source file."""
    paths = []
    for bitdepth in settings.bitdepths:
        directory, name = output_name(filename, bitdepth)
        if settings.targetdir:
            directory = settings.targetdir
        for format in settings.formats:
            path = os.path.join(directory, f'{name}.{format}')
            paths.append(os.path.normcase(os.path.abspath(path)))
    return paths


def delete_sources(results: Iterable[Result], /) -> list[str]:
    """Delete source files of successful results.

    Returns:
        Names of deleted files.

    """
    deleted = []
    for result in results:
        if not result.ok:
            log_warning('not deleting %s', result.filename)
            continue
        try:
            os.remove(result.filename)
        except OSError as exc:
            log_warning('failed to delete %s: %s', result.filename, exc)
            continue
        deleted.append(result.filename)
    return deleted


def show_images(images: Sequence[Image], /) -> None:
    """Display converted images using matplotlib."""
    from matplotlib import pyplot

    for image in images:
        converted = image.converted
        img = converted.data
        title = f'{image.name} {converted.shape} {img.dtype}'
        pyplot.figure()
        if converted.depth == 3:
            if converted.bitdepth == 16:
                warnings.warn('converting 16-bit RGB image for display')
                img = (img >> 8).astype('uint8')
            pyplot.imshow(img, interpolation='nearest')
        else:
            pyplot.imshow(
                img,
                'gray',
                vmin=0,
                vmax=converted.maxval,
                interpolation='nearest',
            )
        pyplot.title(title)
    if images:
        pyplot.show()


def parse_args(argv: Sequence[str], /) -> tuple[Settings, list[str]]:
    """Return settings and file names from command line arguments.

    Switches start with '-', '--', or '/' and are case-insensitive.
    Other arguments are file names, glob patterns, or directories.

    """
    bitdepths: list[int] = []
    formats: list[str] = []
    kwargs: dict[str, Any] = {}
    files: list[str] = []

    for arg in argv:
        if not arg:
            continue
        if arg[0] not in '-/' or (arg[0] == '/' and os.path.exists(arg)):
            files.extend(expand_files(arg))
            continue
        name, _, value = arg.lstrip('-/').partition(':')
        name = name.lower()
        if name in {'?', 'h', 'help'}:
            kwargs['help'] = True
        elif name in {'8', '8bit', '8-bit'}:
            bitdepths.append(8)
        elif name in {'16', '16bit', '16-bit'}:
            bitdepths.append(16)
        elif name in {'target', 'target-dir', 'dir'} and value:
            kwargs['targetdir'] = value
        elif name == 'save' and value.lower() in FILE_FORMATS:
            formats.append(value.lower())
        elif name[:4] == 'save' and name[4:].lstrip('-') in FILE_FORMATS:
            formats.append(name[4:].lstrip('-'))
        elif name in {'delete-source', 'delete-source-files', 'deletesource'}:
            kwargs['deletesource'] = True
        elif name in {'ui', 'show', 'showui', 'show-ui'}:
            kwargs['showui'] = True
        elif name in {'workers', 'j'} and value.isdigit() and int(value) > 0:
            kwargs['workers'] = int(value)
        elif name in {'v', 'verbose'}:
            kwargs['verbose'] = True
        else:
            log_warning('ignoring unknown switch %r', arg)

    if bitdepths:
        kwargs['bitdepths'] = bitdepths
    if formats:
        kwargs['formats'] = formats
    return Settings(**kwargs), files


def expand_files(arg: str, /) -> list[str]:
    """Return Netpbm file names matching file name, pattern, or directory."""
    from glob import glob

    if '*' in arg or '?' in arg:
        return sorted(glob(arg))
    if os.path.isdir(arg):
        files: list[str] = []
        for ext in ('pbm', 'pgm', 'ppm', 'pnm'):
            files.extend(glob(os.path.join(arg, f'*.{ext}')))
        return sorted(files)
    if os.path.isfile(arg):
        return [arg]
    log_warning('file not found: %s', arg)
    return []


def _read_integer(
    data: bytes, offset: int, name: str, /
) -> tuple[int, int, int]:
    """Return header value and offsets of its first and following byte."""
    offset = _SEPARATOR.match(data, offset).end()  # type: ignore
    token = _DIGITS.match(data, offset).group()  # type: ignore
    if not token:
        found = data[offset : offset + 1] or 'end of data'
        raise FormatError(
            FormatErrorReason.MALFORMED_HEADER,
            f'expected {name}, found {found!r}',
            offset=offset,
        )
    value = int(token)
    if value > INT_MAX:
        raise FormatError(
            FormatErrorReason.MALFORMED_HEADER,
            f'{name} {token.decode()} out of range',
            offset=offset,
        )
    if value < 1 and name != 'maxval':
        raise FormatError(
            FormatErrorReason.MALFORMED_HEADER,
            f'invalid {name} {value}',
            offset=offset,
        )
    return value, offset, offset + len(token)


def _read_ascii_samples(
    data: bytes,
    offset: int,
    fmt: NetpbmFormat,
    count: int,
    maxval: int,
    dtype: numpy.dtype,
    /,
) -> numpy.ndarray:
    """Return samples from text image data."""
    if count > len(data) - offset:
        # each sample takes at least one byte
        raise FormatError(
            FormatErrorReason.TRUNCATED_BODY,
            f'expected {count} samples, found {len(data) - offset} bytes',
            offset=len(data),
        )
    samples = numpy.empty(count, dtype)
    pattern = _ASCII_BIT if fmt.bilevel else _ASCII_SAMPLE
    index = 0
    if count > 0:
        for match in pattern.finditer(data, offset):
            token = match.group(1)
            if token is None:
                if match.group(2) is not None:
                    raise FormatError(
                        FormatErrorReason.MALFORMED_BODY,
                        f'unexpected {match.group(2)!r}',
                        offset=match.start(),
                    )
                continue
            value = int(token)
            if value > maxval:
                raise FormatError(
                    FormatErrorReason.SAMPLE_OUT_OF_RANGE,
                    f'sample {value} exceeds maxval {maxval}',
                    offset=match.start(),
                )
            samples[index] = value
            index += 1
            if index == count:
                break
    if index < count:
        raise FormatError(
            FormatErrorReason.TRUNCATED_BODY,
            f'expected {count} samples, found {index}',
            offset=len(data),
        )
    return samples


def indent(*args) -> str:
    """Return joined string representations of objects with indented lines."""
    text = '\n'.join(str(arg) for arg in args)
    return '\n'.join(
        ('  ' + line if line else line) for line in text.splitlines() if line
    )[2:]


def logger() -> logging.Logger:
    """Return cgppm logger."""
    return logging.getLogger('cgppm')


def log_debug(msg, *args, **kwargs):
    """Log message with level DEBUG."""
    logger().debug(msg, *args, **kwargs)


def log_warning(msg, *args, **kwargs):
    """Log message with level WARNING."""
    logger().warning(msg, *args, **kwargs)


def log_error(msg, *args, **kwargs):
    """Log message with level ERROR."""
    logger().error(msg, *args, **kwargs)


HELP = """Usage: cgppm [switches] files

Convert Netpbm files (P1-P6) to 8-bit or 16-bit images.

Switches start with '-' or '/':
  -8, -8bit, -8-bit            convert to 8-bit (default)
  -16, -16bit, -16-bit         convert to 16-bit
  -save:png, -save-png         save as PNG (default)
  -save:jpg, -save-jpg         save as JPEG (8-bit only)
  -save:bmp, -save-bmp         save as BMP (8-bit only)
  -save:tif, -save-tif         save as TIFF (requires tifffile)
  -target:DIR, -dir:DIR        save to directory DIR
  -delete-source               delete converted source files
  -ui, -show                   display converted images
  -workers:N, -j:N             convert at most N files concurrently
  -v, -verbose                 log debug messages
  -?, -h, -help                print this message

Files may be file names, glob patterns, or directories.
"""


def main(argv: list[str] | None = None) -> int:
    """Command line usage main function.

    Convert Netpbm files specified on command line.
    Return 0 if all files were converted, else 1.

    """
    if argv is None:
        argv = sys.argv

    if len(argv) > 1 and '--doctest' in argv:
        import doctest

        doctest.testmod()
        return 0

    args = argv[1:]
    settings, files = parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if settings.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    if not args or settings.help:
        print(HELP)
        return 0
    if not files:
        print('No files were found. Specify some files and try again.')
        return 1

    print(f'Found {len(files)} file(s).')
    print('Converting to', ', '.join(f'{b}-bit' for b in settings.bitdepths))
    results = convert_files(files, settings)

    failed = [result for result in results if not result.ok]
    for result in failed:
        print(f'{result.filename}: {result.stage} failed')
    print(f'Converted {len(results) - len(failed)} of {len(results)} file(s).')

    if settings.deletesource:
        deleted = delete_sources(results)
        print(f'Deleted {len(deleted)} source file(s).')

    if settings.showui:
        print('Waiting for all windows to close... ')
        show_images([image for result in results for image in result.images])

    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
