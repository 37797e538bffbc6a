# sksync

Building blocks for keeping AI agent skill directories in sync. A skill is a
directory that holds a `SKILL.md` file with YAML frontmatter naming the skill
(`name`) and describing it (`description`). sksync copies skills into a shared
directory and links them into each agent's skill folder with symbolic links.

## Installation

```
pip install .
```

Installing from a git source runs the `git` executable, which must be on
`PATH`. Symbolic links are expected to behave as they do on POSIX systems.

## Modules

- `sksync.agents`: where each agent keeps its skills, at user scope or project
  scope. `Scope`, `AgentKind` (`PI`, `CLAUDE_CODE`, `CODEX`, `GEMINI`,
  `OPENCODE`), `CustomAgent`, `TargetPathResolver` and `default_target_dir`.
  A `CustomAgent` has no default directory, so resolving it without an
  override raises `MissingCustomTargetError`. At project scope the target must
  be a relative path inside the project root without `..` or a leading `~`;
  otherwise `ProjectTargetEscapesRootError` is raised. At user scope a leading
  `~` is expanded to the home directory given to the resolver.
- `sksync.hashing`: `hash_directory` gives a directory a `sha256-<hex>` digest
  built from the sorted relative paths and per-file digests, so it does not
  depend on the order files were created in. Directories named `.git`,
  `target` and `node_modules` are skipped. It returns a `DirectoryHash` with
  its `FileHash` entries. `Sha256SourceHashStore.hash_source` returns just the
  directory digest. Failures raise `HashError`.
- `sksync.links`: `FileSystemLinkStore` inspects a target path and returns a
  `TargetState` (`Missing`, `SymlinkToExpectedSource`,
  `SymlinkToUnexpectedSource`, `BrokenSymlink`, `DirectoryConflict`,
  `RegularFileConflict`). It also checks whether a source exists
  (`source_exists`), creates a symlink to the canonical source
  (`create_symlink`, refusing an existing target with `TargetExistsError`) and
  replaces an existing symlink (`replace_symlink`, refusing anything that is
  not a symlink with `TargetNotSymlinkError`, and leaving the old link alone
  when the source is missing with `SourceMissingError`).
- `sksync.git`: `GitClient.clone_checkout` makes a blob-less clone and checks
  out `GitInstallSource.wanted_ref()` detached, fetching the reference from
  `origin` if it is not already present. `GitClient.resolve_head` returns the
  commit HEAD points at. Failures raise `GitCommandError`.
- `sksync.install`: `FileSystemSkillInstaller.install_skill` copies a skill
  from a `LocalInstallSource` or a `GitInstallSource` into a staging directory
  beside the destination, validates its `SKILL.md` with
  `parse_skill_manifest`, and then moves it over the destination. The staging
  directory is removed on failure. It returns an `InstalledSkillSource`; for
  git sources the reference is pinned to the checked-out commit. Errors derive
  from `SkillInstallError`: `MissingSourcePathError`,
  `InvalidGitSubpathError`, `InvalidSkillPackageError` and `GitInstallError`.

## Example

```python
from pathlib import Path

from sksync.agents import AgentKind, Scope, TargetPathResolver
from sksync.install import FileSystemSkillInstaller, LocalInstallSource
from sksync.links import FileSystemLinkStore, Missing

project = Path.cwd()
skill_dir = project / ".sksync" / "skills" / "review"

FileSystemSkillInstaller().install_skill(
    LocalInstallSource(Path("vendor/review")), skill_dir, "review"
)

resolver = TargetPathResolver(project, Path.home())
target_root = resolver.resolve(AgentKind.CLAUDE_CODE, Scope.PROJECT, None)
target = target_root / "review"

store = FileSystemLinkStore()
if isinstance(store.inspect_target(target, skill_dir), Missing):
    store.create_symlink(skill_dir, target)
```

## What this package does not do

This is a library only. It has no command-line program, and it does not read
or write a project configuration file, a lockfile or bundle manifests; the
caller decides which skills to install and where to link them.

## Running the tests

```
pip install ".[test]"
pytest
```