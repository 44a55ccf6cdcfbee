# Sample IoT sensor readings. Repetitive telemetry like this is where
# a static Huffman code pays off.

from typing import Dict

SAMPLE_DATASETS: Dict[str, str] = {
    "temperature": "TEMP:25.5C,TEMP:25.5C,TEMP:25.6C,TEMP:25.5C,TEMP:25.7C,TEMP:25.5C,TEMP:25.5C,TEMP:25.6C",
    "motion": "MOTION:0,MOTION:0,MOTION:0,MOTION:1,MOTION:0,MOTION:0,MOTION:0,MOTION:0,MOTION:1,MOTION:0",
    "humidity": "HUM:60%,HUM:60%,HUM:61%,HUM:60%,HUM:60%,HUM:62%,HUM:60%,HUM:60%,HUM:61%",
    "power": "100W,100W,105W,100W,100W,110W,100W,100W,105W,100W,100W,100W",
}


def get_sample(name: str) -> bytes:
    try:
        return SAMPLE_DATASETS[name].encode("ascii")
    except KeyError:
        raise KeyError(f"unknown sample {name!r}, expected one of {', '.join(SAMPLE_DATASETS)}") from None


def repeat_to_size(sample: bytes, size: int) -> bytes:
    """Repeat a sample, comma separated, and cut it to exactly size bytes."""
    if size <= 0:
        return b""
    unit = sample + b","
    reps = size // len(unit) + 1
    return (unit * reps)[:size]
