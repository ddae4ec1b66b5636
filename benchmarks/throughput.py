"""
Benchmark: parse throughput on synthetic maps of growing size.
"""
import time

from fomap.data_model import MapParserSettings
from fomap.parser import parse


def make_map(n_tiles, n_objects):
    lines = [
        "[Header]",
        "Version              4",
        "MaxHexX              400",
        "MaxHexY              400",
        "",
        "[Tiles]",
    ]
    for i in range(n_tiles):
        x, y = i % 400, (i // 400) % 400
        kind = 'roof' if i % 7 == 0 else 'tile'
        lines.append(f"{kind:<10} {x:<4} {y:<4} art\\tiles\\gr{i % 50:03d}.frm")
    lines += ["", "[Objects]"]
    for i in range(n_objects):
        lines += [
            f"MapObjType           {1 + i % 2}",
            f"ProtoId              {2000 + i % 300}",
            f"MapX                 {i % 400}",
            f"MapY                 {(i * 7) % 400}",
            f"UID                  {i + 1}",
            "",
        ]
    return "\n".join(lines) + "\n"


def benchmark(n_tiles, n_objects, repeats=5):
    text = make_map(n_tiles, n_objects)
    settings = MapParserSettings()
    print(f"\n{'='*60}")
    print(f"  {n_tiles} tiles  |  {n_objects} objects  |  {len(text):,} chars")
    print(f"{'='*60}")

    best = float('inf')
    for _ in range(repeats):
        t0 = time.time()
        game_map = parse(text, settings)
        best = min(best, time.time() - t0)
    assert len(game_map.tiles) == n_tiles
    assert len(game_map.objects) == n_objects

    print(f"  Best of {repeats}: {best * 1000:.1f} ms")
    print(f"  Throughput: {len(text) / best / 1e6:.2f} Mchars/sec")
    return best


if __name__ == '__main__':
    for n_tiles, n_objects in [(1_000, 200), (10_000, 2_000), (50_000, 10_000)]:
        benchmark(n_tiles, n_objects)

    print(f"\n{'='*60}")
    print("  Done.")
