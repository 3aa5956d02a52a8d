import typer  # type: ignore
import json
from pathlib import Path
from typing import Optional
from typing_extensions import Annotated

from pydantic import ValidationError
from rich.console import Console  # type: ignore
from rich.table import Table  # type: ignore

from apsprofile.analysis.summary import daily_basal_totals, hourly_profile_frame
from apsprofile.core.clock import MS_PER_HOUR
from apsprofile.core.devices.models import PumpDescription
from apsprofile.core.profile.records import InsulinConfiguration, ProfileSwitch
from apsprofile.core.profile.sealed import ProfileConfigurationError, SealedProfile
from apsprofile.core.safety.validator import ProfileValidator
from apsprofile.notifications import CollectingNotificationSink
from apsprofile.presets import PresetError, hard_limits_for, load_presets
from apsprofile.validation import (
    format_validation_error,
    load_hard_limits,
    load_profile_json,
    load_pump_description,
)


app = typer.Typer(help="apsprofile CLI - inspect, validate and export artificial-pancreas treatment profiles.")
presets_app = typer.Typer(help="Built-in hard-limit presets.")
app.add_typer(presets_app, name="presets")


def _load_profile(path: Path, percentage: int, timeshift: int, console: Console) -> SealedProfile:
    if not path.is_file():
        console.print(f"[bold red]Error: Profile file '{path}' not found.[/bold red]")
        raise typer.Exit(code=1)
    try:
        pure = load_profile_json(path)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error: '{path}' is not valid JSON: {e}[/bold red]")
        raise typer.Exit(code=1)
    except ValidationError as e:
        console.print(f"[bold red]Error: '{path}' is not a valid profile document:[/bold red]")
        for line in format_validation_error(e):
            console.print(f"  - {line}")
        raise typer.Exit(code=1)

    try:
        if percentage == 100 and timeshift == 0:
            return SealedProfile(pure)
        switch = ProfileSwitch(
            timestamp=0,
            basal_blocks=pure.basal_blocks,
            isf_blocks=pure.isf_blocks,
            ic_blocks=pure.ic_blocks,
            target_blocks=pure.target_blocks,
            glucose_unit=pure.glucose_unit,
            profile_name=path.stem,
            insulin_configuration=InsulinConfiguration.from_dia_hours(pure.dia),
            timeshift=timeshift * MS_PER_HOUR,
            percentage=percentage,
        )
        return SealedProfile(switch, timezone=pure.timezone)
    except ProfileConfigurationError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)


def _parse_time_of_day(value: str, console: Console) -> int:
    try:
        hours_text, minutes_text = value.split(":")
        hours, minutes = int(hours_text), int(minutes_text)
    except ValueError:
        console.print(f"[bold red]Error: '{value}' is not HH:MM.[/bold red]")
        raise typer.Exit(code=1)
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        console.print(f"[bold red]Error: '{value}' is out of range.[/bold red]")
        raise typer.Exit(code=1)
    return hours * 3600 + minutes * 60


@app.command()
def show(
    profile_path: Annotated[Path, typer.Argument(help="Path to a profile JSON document")],
    percentage: Annotated[int, typer.Option(help="Percentage applied to the profile")] = 100,
    timeshift: Annotated[int, typer.Option(help="Timeshift in whole hours")] = 0,
    at: Annotated[Optional[str], typer.Option(help="Only show values at this time of day (HH:MM)")] = None,
):
    """
    Print the hourly schedule as the dosing loop sees it.
    """
    console = Console()
    profile = _load_profile(profile_path, percentage, timeshift, console)

    if at is not None:
        seconds = _parse_time_of_day(at, console)
        console.print(f"[bold blue]{profile_path.name} at {at}[/bold blue] ({profile.units.as_text})")
        console.print(f"  Basal:  {profile.get_basal_time_from_midnight(seconds):.2f} U/h")
        console.print(f"  IC:     {profile.get_ic_time_from_midnight(seconds):.1f} g/U")
        console.print(f"  ISF:    {profile.get_isf_mgdl_time_from_midnight(seconds):.1f} mg/dL/U")
        console.print(
            f"  Target: {profile.get_target_low_mgdl_time_from_midnight(seconds):.0f}"
            f" - {profile.get_target_high_mgdl_time_from_midnight(seconds):.0f} mg/dL"
        )
        return

    frame = hourly_profile_frame(profile)
    table = Table(title=f"{profile_path.name} ({percentage}%, timeshift {timeshift}h)")
    for column in ("Time", "Basal U/h", "IC g/U", "ISF mg/dL/U", "Target mg/dL"):
        table.add_column(column, justify="right")
    for row in frame.itertuples(index=False):
        table.add_row(
            row.time,
            f"{row.basal:.2f}",
            f"{row.ic:.1f}",
            f"{row.isf_mgdl:.1f}",
            f"{row.target_low_mgdl:.0f} - {row.target_high_mgdl:.0f}",
        )
    console.print(table)

    totals = daily_basal_totals(profile)
    console.print(
        f"DIA: {profile.dia:.1f} h | Daily basal: {totals['percentage_basal_sum']:.2f} U "
        f"(base {totals['base_basal_sum']:.2f} U)"
    )


@app.command()
def validate(
    profile_path: Annotated[Path, typer.Argument(help="Path to a profile JSON document")],
    percentage: Annotated[int, typer.Option(help="Percentage applied to the profile")] = 100,
    timeshift: Annotated[int, typer.Option(help="Timeshift in whole hours")] = 0,
    pump_config: Annotated[Optional[Path], typer.Option(help="YAML file describing pump basal capabilities")] = None,
    pump_min: Annotated[float, typer.Option(help="Pump minimum basal rate (U/h)")] = 0.05,
    pump_max: Annotated[float, typer.Option(help="Pump maximum basal rate (U/h)")] = 25.0,
    sub_hour: Annotated[bool, typer.Option(help="Pump accepts basal segments shorter than one hour")] = False,
    limits: Annotated[Optional[Path], typer.Option(help="YAML file with hard limits")] = None,
    preset: Annotated[str, typer.Option(help="Hard-limit preset when no limits file is given")] = "adult",
):
    """
    Check a profile against pump capabilities and hard limits.
    """
    console = Console()
    profile = _load_profile(profile_path, percentage, timeshift, console)

    try:
        if pump_config is not None:
            pump = load_pump_description(pump_config)
        else:
            pump = PumpDescription(
                supports_sub_hour_basal=sub_hour,
                basal_minimum_rate=pump_min,
                basal_maximum_rate=pump_max,
            )
        hard_limits = load_hard_limits(limits) if limits is not None else hard_limits_for(preset)
    except ValidationError as e:
        console.print("[bold red]Error: invalid configuration:[/bold red]")
        for line in format_validation_error(e):
            console.print(f"  - {line}")
        raise typer.Exit(code=1)
    except (PresetError, ValueError, OSError) as e:
        console.print(f"[bold red]Error loading configuration: {e}[/bold red]")
        raise typer.Exit(code=1)

    sink = CollectingNotificationSink()
    result = ProfileValidator(notifier=sink).validate(profile, pump, hard_limits, source=profile_path.name)

    for notification in sink.notifications:
        console.print(f"[yellow]{notification.code.name}: {notification.message}[/yellow]")
    if result.is_valid:
        console.print(f"[green]Profile '{profile_path.name}' is valid.[/green]")
        return

    console.print(f"[bold red]Profile '{profile_path.name}' is not valid:[/bold red]")
    for reason in result.reasons:
        console.print(f"  - {reason}")
    raise typer.Exit(code=1)


@app.command()
def export(
    profile_path: Annotated[Path, typer.Argument(help="Path to a profile JSON document")],
    percentage: Annotated[int, typer.Option(help="Percentage applied to the profile")] = 100,
    timeshift: Annotated[int, typer.Option(help="Timeshift in whole hours")] = 0,
    output: Annotated[Optional[Path], typer.Option(help="Write the canonical JSON here instead of stdout")] = None,
):
    """
    Write the canonical (midnight-aligned, scaled) profile document.
    """
    console = Console()
    profile = _load_profile(profile_path, percentage, timeshift, console)
    document = json.dumps(profile.to_pure_ns_json(), indent=2)

    if output is None:
        typer.echo(document)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document)
    console.print(f"[green]Canonical profile written to {output}[/green]")


@presets_app.command("list")
def presets_list():
    """
    List the built-in hard-limit presets.
    """
    console = Console()
    table = Table(title="Hard-limit presets")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Max basal U/h", justify="right")
    table.add_column("DIA h", justify="right")
    for preset in load_presets():
        limits = preset.get("limits", {})
        table.add_row(
            preset.get("name", ""),
            preset.get("description", ""),
            f"{limits.get('max_basal', 0.0):.1f}",
            f"{limits.get('min_dia', 0.0):.0f} - {limits.get('max_dia', 0.0):.0f}",
        )
    console.print(table)


if __name__ == "__main__":
    app()
