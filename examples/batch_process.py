"""
Example of batch processing a directory of images
"""

from pathlib import Path
from photobar import FormatDetector, batch_process


def main():
    photo_dir = Path("./images")
    
    if not photo_dir.exists():
        print(f"Error: Directory {photo_dir} not found")
        print("Please create an 'images' directory with some photos")
        return
    
    images = sorted(p for p in photo_dir.iterdir() if p.is_file() and FormatDetector.is_supported(p))
    
    if not images:
        print(f"No images found in {photo_dir}")
        return
    
    print(f"Found {len(images)} images")
    print("=" * 60)
    
    # Progress callback
    def on_progress(current, total, result):
        if result.failed:
            print(f"[{current}/{total}] ✗ {result.source.name}: {result.error}")
        else:
            mark = "~" if result.used_fallback else "✓"
            print(f"[{current}/{total}] {mark} {result.source.name}")
            print(f"           Camera: {result.metadata.model}")
    
    results = batch_process(
        images,
        full_dir=photo_dir / "fulls",
        thumb_dir=photo_dir / "thumbs",
        progress_callback=on_progress
    )
    
    # Summary
    print("=" * 60)
    fallback = [r for r in results if r.success and r.used_fallback]
    failed = [r for r in results if r.failed]
    
    print(f"\nResults:")
    print(f"  Processed:    {len(results) - len(failed)}")
    print(f"  Via fallback: {len(fallback)}")
    print(f"  Placeholders: {len(failed)}")
    
    cameras = {r.metadata.model for r in results if r.success}
    if cameras:
        print(f"\nCameras found:")
        for camera in sorted(cameras):
            print(f"  - {camera}")


if __name__ == "__main__":
    main()
