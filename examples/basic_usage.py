"""Basic usage example for qpack.

Converts a JSON document to QPack and back, printing the hex encoding and the
token stream in between.
"""

from __future__ import annotations

import json
import sys

from qpack import Config, QPack, safe
from qpack.cli.tokens import dump_tokens

DOCUMENT = (
    '{"SAMPLE.w00000.flag.string":[[1637979480080,"N"],[1637979485080,"N"]],'
    '"SAMPLE.w00000.value.float":[[1637979480080,29.1100001],[1637979485080,29.1100001]],'
    '"SAMPLE.w00000.cou.float":[[1637979480080,206.09879787908],[1637979485080,145.5500001]]}'
)


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("qpack Basic Usage Example")
    print("=" * 60)

    value = json.loads(DOCUMENT)
    print(f"\n1. JSON input ({len(DOCUMENT)} bytes):")
    print(json.dumps(value))

    # 2. Encode
    data, error = safe.encode(value)
    if error is not None:
        print(f"Encoding failed: {error}")
        return
    print(f"\n2. QPack encoding ({len(data)} bytes):")
    print(data.hex())

    # 3. Token stream
    print("\n3. Token stream:")
    dump_tokens(data, sys.stdout)

    # 4. Decode
    decoded, error = safe.decode(data, Config(decode_raw_as_str=True))
    if error is not None:
        print(f"Decoding failed: {error}")
        return
    print("\n4. Decoded back to JSON:")
    print(json.dumps(decoded))
    print(f"   Round trip OK: {decoded == value}")

    # 5. Configured codec instance
    codec = QPack()
    codec.set_encode_empty_as_array(True)
    print("\n5. Empty object with encode_empty_as_array:")
    print(f"   {codec.encode({}).hex()} -> {codec.decode(codec.encode({}))!r}")

    # 6. Errors as values
    print("\n6. Malformed input through the safe API:")
    print(f"   {safe.decode(bytes.fromhex('fd'))!r}")


if __name__ == "__main__":
    main()
