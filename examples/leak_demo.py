import asyncio

from leaklab import LeakLab, LeakLabConfig, Variant, ViewMode, format_bytes


async def leak_demo(components: int = 5):
    """
      Runs the leaky and the proper variant side by side and prints the live stats.

      Args:
          components (int): How many components of each variant to mount and unmount.
      """
    config = LeakLabConfig(sample_interval=0.2, leak_warning_threshold=3 * 1024 * 1024)

    async with LeakLab(config, mode=ViewMode.COMPARISON) as lab:
        await lab.start_monitor(on_sample=lambda stats: print(stats.describe()))

        # Mount a leaky/proper pair per round
        ids = []
        for _ in range(components):
            ids.extend(result.value for result in lab.create_for_mode() if result)
            await asyncio.sleep(0.1)

        # Unmount everything, the leaky half keeps its memory
        for instance_id in ids:
            lab.destroy(instance_id)
        await asyncio.sleep(0.5)

        for variant, counts in lab.breakdown().items():
            print(f"{variant.value:>6}: {counts.leaked_blocks} leaked blocks, {format_bytes(counts.leaked_memory)}")

        cleared = lab.clear_leaked()
        print(f"Manual GC cleared {cleared} blocks")
        await asyncio.sleep(0.3)


if __name__ == "__main__":
    asyncio.run(leak_demo())
