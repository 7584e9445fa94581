"""
Simple example of using photobar to process one image
"""

from pathlib import Path
from photobar import process_image


def main():
    # Replace with actual image path
    image_path = Path("example.jpg")
    
    if not image_path.exists():
        print(f"Error: {image_path} not found")
        print("Please provide a valid image path")
        return
    
    print(f"Processing {image_path}...")
    print("-" * 60)
    
    # Outputs go to fulls/ and thumbs/ next to the image
    result = process_image(image_path)
    
    # Or through the ImageMagick CLI with a specific font:
    # result = process_image(image_path, backend="magick", font_path="/path/to/DejaVuSans.ttf")
    
    if result.success:
        if result.used_fallback:
            print(f"✓ Success (fallback, primary failed: {result.error})\n")
        else:
            print("✓ Success!\n")
        
        metadata = result.metadata
        print(f"Camera:         {metadata.model}")
        if metadata.f_number:
            print(f"Aperture:       f/{metadata.f_number}")
        if metadata.exposure:
            print(f"Shutter:        {metadata.exposure}")
        if metadata.iso:
            print(f"ISO:            {metadata.iso}")
        
        print(f"\nFull size:      {result.full_path}")
        print(f"Thumbnail:      {result.thumb_path}")
        
    else:
        print(f"✗ Failed: {result.error}")
        print(f"  Placeholders written to {result.full_path} and {result.thumb_path}")


if __name__ == "__main__":
    main()
