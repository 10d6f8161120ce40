"""
Report formatting and display for the CLI interface.

Prints the similarity mapping produced by BKTree.search_similars.
"""

from __future__ import annotations


def _calculate_statistics(similars: dict[str, list[str]]) -> dict[str, int]:
    """
    Calculate statistics for a similarity mapping.

    Returns:
        Dictionary with:
        - total_groups: Number of images with at least one similar image
        - total_matches: Number of recorded (image, similar image) pairs
    """
    return {
        'total_groups': len(similars),
        'total_matches': sum(len(names) for names in similars.values()),
    }


def _print_section_header(title: str) -> None:
    """Print a section header with divider lines."""
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def print_similarity_report(similars: dict[str, list[str]], radius: int) -> None:
    """
    Print every image and the images found similar to it.

    Args:
        similars: Mapping of image name -> similar image names
        radius: Radius used for the sweep (shown in the header)
    """
    _print_section_header(f"SIMILAR IMAGES (radius={radius})")

    stats = _calculate_statistics(similars)
    print(f"\n{stats['total_groups']} images with similar matches, "
          f"{stats['total_matches']} matches in total")

    for name, others in similars.items():
        print(f"\n{name} is similar to:")
        for other in others:
            print(f" - {other}")

    print("\n" + "=" * 70)


__all__ = ['print_similarity_report']
