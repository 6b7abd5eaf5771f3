"""
Monitoring Utilities
Command metrics and health reporting
"""

import os
import platform
import time
from typing import Any, Dict, List

import psutil


class Monitoring:
    """Counts dispatcher outcomes and reports process health."""

    def __init__(self):
        self.start_time = time.time()
        self.metrics = {
            "messagesProcessed": 0,
            "commandsExecuted": 0,
            "commandsDenied": 0,
            "commandsFailed": 0,
            "creditsCharged": 0,
            "creditsRefunded": 0,
        }

    def record_message(self) -> None:
        self.metrics["messagesProcessed"] += 1

    def record_command(self) -> None:
        self.metrics["commandsExecuted"] += 1

    def record_denied(self) -> None:
        self.metrics["commandsDenied"] += 1

    def record_error(self) -> None:
        self.metrics["commandsFailed"] += 1

    def record_charge(self, amount: int) -> None:
        self.metrics["creditsCharged"] += amount

    def record_refund(self, amount: int) -> None:
        self.metrics["creditsRefunded"] += amount

    def get_system_metrics(self) -> Dict[str, Any]:
        """
        Get system metrics.

        Returns:
            Dict with memory, CPU, uptime, and platform info
        """
        process = psutil.Process()
        memory_info = process.memory_info()
        load_avg = os.getloadavg() if hasattr(os, "getloadavg") else (0.0, 0.0, 0.0)

        return {
            "memory": {
                "used": round(memory_info.rss / 1024 / 1024),
                "systemTotal": round(psutil.virtual_memory().total / 1024 / 1024),
            },
            "cpu": {
                "loadAvg1m": round(load_avg[0], 2),
                "cores": psutil.cpu_count(),
            },
            "uptime": {
                "bot": self.format_duration(int(time.time() - self.start_time)),
            },
            "platform": {
                "python": platform.python_version(),
                "os": f"{platform.system()} {platform.release()}",
            },
        }

    def get_app_metrics(self) -> Dict[str, Any]:
        hours = (time.time() - self.start_time) / 3600
        per_hour = round(self.metrics["commandsExecuted"] / hours) if hours > 0 else 0
        return {**self.metrics, "commandsPerHour": per_hour}

    def format_status(self) -> str:
        """
        Format metrics for display.

        Returns:
            Formatted status string
        """
        system = self.get_system_metrics()
        app = self.get_app_metrics()

        lines = [
            "📊 **Bot Status**",
            "",
            f"Memory: {system['memory']['used']}MB / {system['memory']['systemTotal']}MB",
            f"CPU Load: {system['cpu']['loadAvg1m']} ({system['cpu']['cores']} cores)",
            f"Uptime: {system['uptime']['bot']}",
            "",
            f"Commands: {app['commandsExecuted']} ({app['commandsPerHour']}/hr)",
            f"Denied: {app['commandsDenied']} | Failed: {app['commandsFailed']}",
            f"Credits charged: {app['creditsCharged']} | refunded: {app['creditsRefunded']}",
        ]

        return "\n".join(lines)

    @staticmethod
    def format_duration(seconds: int) -> str:
        """
        Format duration in human readable format.

        Args:
            seconds: Duration in seconds

        Returns:
            Formatted duration string
        """
        days = seconds // 86400
        hours = (seconds % 86400) // 3600
        mins = (seconds % 3600) // 60
        secs = seconds % 60

        parts: List[str] = []
        if days > 0:
            parts.append(f"{days}d")
        if hours > 0:
            parts.append(f"{hours}h")
        if mins > 0:
            parts.append(f"{mins}m")
        if secs > 0 or not parts:
            parts.append(f"{secs}s")

        return " ".join(parts)
