"""Shared test helpers: TypeScript fixture sources and a file-tree writer."""

from pathlib import Path

ACTION_BASES_TS = """\
export interface CommandAction {
  readonly type: string;
}

export interface DocumentAction {
  readonly type: string;
}

export interface EventAction {
  readonly type: string;
}
"""

LAYOUT_ACTIONS_TS = """\
import { CommandAction, EventAction } from './actions';

export enum LayoutCommandTypes {
  OpenSidenav = '[Layout] Open Sidenav',
  CloseSidenav = '[Layout] Close Sidenav',
  LogSidenav = '[Layout] Log Sidenav'
}

export enum LayoutEventTypes {
  SidenavOpened = '[Layout] Sidenav Opened',
  SidenavClosed = '[Layout] Sidenav Closed',
  SidenavToggled = '[Layout] Sidenav toggled'
}

export class OpenSidenavCommand implements CommandAction {
  readonly type = LayoutCommandTypes.OpenSidenav;
}

export class CloseSidenavCommand implements CommandAction {
  readonly type = LayoutCommandTypes.CloseSidenav;
}

export class LogSidenavCommand implements CommandAction {
  readonly type = LayoutCommandTypes.LogSidenav;
}

export class SidenavOpenedEvent implements EventAction {
  readonly type = LayoutEventTypes.SidenavOpened;
}

export class SidenavClosedEvent implements EventAction {
  readonly type = LayoutEventTypes.SidenavClosed;
}

export class SidenavToggledEvent implements EventAction {
  readonly type = LayoutEventTypes.SidenavToggled;
}

export type LayoutCommands = OpenSidenavCommand | CloseSidenavCommand | LogSidenavCommand;
export type LayoutEvents = SidenavOpenedEvent | SidenavClosedEvent | SidenavToggledEvent;
"""

LAYOUT_EFFECTS_TS = """\
import { Observable } from 'rxjs';
import { concatMap, map } from 'rxjs/operators';
import { Actions, Effect, ofType } from '@ngrx/effects';

import {
  LayoutCommands,
  LayoutCommandTypes,
  LogSidenavCommand,
  SidenavClosedEvent,
  SidenavOpenedEvent,
  SidenavToggledEvent
} from './layout.actions';

export class LayoutEffects {

  @Effect()
  SIDENAV_OPENED: Observable<SidenavOpenedEvent> = this._actions.pipe(
    ofType<LayoutCommands>(LayoutCommandTypes.OpenSidenav),
    map(() => new SidenavOpenedEvent())
  );

  @Effect()
  SIDENAV_CLOSED: Observable<SidenavClosedEvent> = this._actions.pipe(
    ofType<LayoutCommands>(LayoutCommandTypes.CloseSidenav),
    map(() => new SidenavClosedEvent())
  );

  @Effect()
  // Splitter
  WEIRD_SIDENAV: Observable<SidenavClosedEvent | LogSidenavCommand> = this._actions.pipe(
    ofType<LayoutCommands>(LayoutCommandTypes.CloseSidenav),
    concatMap(() => [
      new SidenavClosedEvent(),
      new LogSidenavCommand()
    ])
  );

  @Effect()
  @_AggregatorDecider()
  ALL_SIDENAV: Observable<SidenavToggledEvent> = this._actions.pipe(
    ofType<LayoutCommands>(
      LayoutCommandTypes.OpenSidenav,
      LayoutCommandTypes.CloseSidenav
    ),
    map(() => new SidenavToggledEvent())
  );

  constructor(private _actions: Actions) {}
}
"""

FOO_EFFECTS_TS = """\
import { Observable } from 'rxjs';
import { map } from 'rxjs/operators';
import { Actions, Effect, ofType } from '@ngrx/effects';
import { CommandAction, EventAction } from './actions';

export enum FooTypes {
  Foo = '[Foo] Foo',
  Bar = '[Foo] Bar',
  Baz = '[Foo] Baz'
}

export class FooCommand implements CommandAction {
  readonly type = FooTypes.Foo;
}

export class BarCommand implements CommandAction {
  readonly type = FooTypes.Bar;
}

export class BazEvent implements EventAction {
  readonly type = FooTypes.Baz;
}

export class FooEffects {
  @Effect()
  X: Observable<BazEvent> = this.actions$.pipe(
    ofType(FooTypes.Foo, FooTypes.Bar),
    map(() => new BazEvent())
  );

  constructor(private actions$: Actions) {}
}
"""

NO_EFFECTS_TS = """\
export class PlainService {
  count = 0;

  increment(): number {
    return ++this.count;
  }
}
"""

BROKEN_TS = """\
export class Broken {
  foo(: void {
}
"""


def write_tree(root: Path, files: dict[str, str]) -> dict[str, Path]:
    """Write {relative_path: content} under root and return {relative_path: path}."""
    written = {}
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        written[rel] = path
    return written


def effects_class(*members: str, imports: str = "") -> str:
    """Wrap member sources in an effects class with the usual imports."""
    body = "\n\n".join(members)
    return f"""\
import {{ Observable }} from 'rxjs';
import {{ map }} from 'rxjs/operators';
import {{ Actions, Effect, ofType }} from '@ngrx/effects';
{imports}
export class TestEffects {{
{body}

  constructor(private actions$: Actions) {{}}
}}
"""
